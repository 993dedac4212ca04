# agent/unlockbt/__init__.py
"""
Token Unlock Backtester — does buying before a token unlock and selling
after it pay off historically?
"""
__version__ = "1.0.0"
__all__ = []
