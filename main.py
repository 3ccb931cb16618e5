"""
Financial Advisor Assistant - API server

Usage:
    python main.py            # development, auto-reload
    python main.py --prod     # no reload, several workers
"""

import argparse
from pathlib import Path

import uvicorn
from loguru import logger

from src.utils.logger import setup_logger

project_root = Path(__file__).resolve().parent


def main():
    """Start the FastAPI server"""
    parser = argparse.ArgumentParser(description="Run the assistant API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--prod", action="store_true", help="Disable reload and run multiple workers")
    parser.add_argument("--workers", type=int, default=4)
    args = parser.parse_args()

    setup_logger()
    logger.info("="*80)
    logger.info("Financial Advisor Assistant - API Server")
    logger.info("="*80)
    logger.info(f"Server will be available at: http://localhost:{args.port}")
    logger.info(f"API Documentation: http://localhost:{args.port}/docs")
    logger.info(f"Query: POST http://localhost:{args.port}/api/query")
    logger.info("="*80)

    if args.prod:
        uvicorn.run(
            "src.api.app:app",
            host=args.host,
            port=args.port,
            workers=args.workers,
            log_level="info",
            access_log=True,
        )
    else:
        uvicorn.run(
            "src.api.app:app",
            host=args.host,
            port=args.port,
            reload=True,
            log_level="info",
            access_log=True,
            reload_dirs=[str(project_root / "src")]
        )


if __name__ == "__main__":
    main()
