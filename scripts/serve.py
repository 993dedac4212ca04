#!/usr/bin/env python3
# scripts/serve.py
"""
Run the API + static frontend.

Usage:
  python scripts/serve.py                 # HOST/PORT from env (0.0.0.0:3000)
  python scripts/serve.py --port 8080 --reload
"""
import sys
import os
import argparse

import uvicorn
from dotenv import load_dotenv

AGENT_DIR = os.path.join(os.path.dirname(__file__), '..', 'agent')
sys.path.insert(0, AGENT_DIR)

ENV_PATH = os.path.join(os.path.dirname(__file__), '..', '.env')
if os.path.exists(ENV_PATH):
    load_dotenv(ENV_PATH)


def main():
    from unlockbt import config

    parser = argparse.ArgumentParser(description="Token unlock backtester server")
    parser.add_argument("--host",   type=str, default=config.HOST, help=f"Bind host (default: {config.HOST})")
    parser.add_argument("--port",   type=int, default=config.PORT, help=f"Bind port (default: {config.PORT})")
    parser.add_argument("--reload", action="store_true",           help="Auto-reload on code changes")
    args = parser.parse_args()

    print(f"[API] Server running at http://{args.host}:{args.port}/")
    uvicorn.run(
        "unlockbt.api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        app_dir=AGENT_DIR,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
