#!/usr/bin/env python3
"""
Startup script for the Match Report Desk API (FastAPI + uvicorn)
"""

import argparse
import logging
import sys
from pathlib import Path
from dotenv import load_dotenv


def setup_logging(log_file: Path, level: str = "INFO") -> None:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    handlers = [
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(log_file, encoding="utf-8")
    ]
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=fmt, datefmt=datefmt, handlers=handlers)


def check_requirements() -> bool:
    logger = logging.getLogger("run")
    logger.info("Checking requirements...")

    from backend.config import Config
    from parsing.team_resolver import TeamDirectoryError

    cfg = Config()
    if not cfg.TEAMS_PATH.exists():
        logger.error("Team directory not found at %s", cfg.TEAMS_PATH)
        logger.info("Set TEAMS_PATH to a YAML file with a 'teams' list")
        return False
    try:
        directory = cfg.get_team_directory()
    except TeamDirectoryError as e:
        logger.error("Team directory could not be loaded: %s", e)
        return False
    logger.info("Team directory OK (%d teams from %s)", len(directory.teams()), cfg.TEAMS_PATH)

    try:
        cfg.build_parser()
    except Exception as e:
        logger.error("Report parser could not be built (MATCH_TIMEZONE=%s): %s", cfg.MATCH_TIMEZONE, e)
        return False
    return True


def main():
    load_dotenv()

    from backend.config import Config
    cfg = Config()

    parser = argparse.ArgumentParser(description="Run the Match Report Desk API server")
    parser.add_argument("--host", default=cfg.API_HOST)
    parser.add_argument("--port", type=int, default=cfg.API_PORT)
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--log-file", default=str(cfg.LOG_FILE))
    args = parser.parse_args()

    setup_logging(Path(args.log_file), cfg.LOG_LEVEL)
    logger = logging.getLogger("run")

    logger.info("Match Report Desk")
    logger.info("Starting with host=%s port=%s reload=%s", args.host, args.port, args.reload)

    if not check_requirements():
        sys.exit(1)

    logger.info("Starting server at http://%s:%s", args.host, args.port)

    import uvicorn

    # Use import string for reload to work properly
    if args.reload:
        uvicorn.run(
            "backend.app:app",
            host=args.host,
            port=args.port,
            log_level="info",
            reload=True,
        )
    else:
        from backend.app import app
        uvicorn.run(
            app,
            host=args.host,
            port=args.port,
            log_level="info",
            reload=False,
        )


if __name__ == "__main__":
    main()
