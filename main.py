"""
Entry point for the Postboard Backend

Usage: python main.py [--host HOST] [--port PORT] [--seed]
"""

import argparse
import asyncio
import os
import sys

from dotenv import load_dotenv

load_dotenv()

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from app import app
from config.settings import PORT


def parse_args():
    parser = argparse.ArgumentParser(description="Run the Postboard API server")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    parser.add_argument("--port", type=int, default=PORT, help=f"Port to listen on (default {PORT})")
    parser.add_argument("--seed", action="store_true", help="Insert the sample users and posts, then exit")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    if args.seed:
        from database.seed import run_seed
        asyncio.run(run_seed())
    else:
        import uvicorn
        uvicorn.run(app, host=args.host, port=args.port)
