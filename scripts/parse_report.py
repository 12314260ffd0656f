#!/usr/bin/env python3
"""
Parse a saved match report and print the resulting match record as JSON.

The report can be the pasted text saved to a file, or the federation match
page saved as .html (flattened to one line per text block first).

Usage:
    python scripts/parse_report.py report.txt
    python scripts/parse_report.py match.html --existing draft.json --stats stats.txt
    cat report.txt | python scripts/parse_report.py -
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from bs4 import BeautifulSoup

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.config import Config
from parsing.lineup_sheet_parser import parse_lineup_sheet
from parsing.match_record import MatchRecord
from parsing.match_stats_parser import parse_match_stats

logger = logging.getLogger("parse_report")

HTML_SUFFIXES = {".html", ".htm"}


def html_to_text(markup: str) -> str:
    """Flatten an HTML page to one text block per line."""
    soup = BeautifulSoup(markup, "lxml")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return soup.get_text("\n", strip=True)


def read_report(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    content = path.read_text(encoding="utf-8", errors="ignore")
    if path.suffix.lower() in HTML_SUFFIXES:
        return html_to_text(content)
    return content


def load_existing(path: str) -> MatchRecord:
    with open(path, "r", encoding="utf-8") as f:
        return MatchRecord.model_validate(json.load(f))


def main() -> int:
    parser = argparse.ArgumentParser(description="Parse a pasted/saved match report into JSON")
    parser.add_argument("report", help="Report file (.txt or .html), or '-' for stdin")
    parser.add_argument("--existing", help="JSON file with the record to merge into")
    parser.add_argument("--stats", help="File with a pasted statistics block")
    parser.add_argument("--lineups", help="File with a pasted broadcast lineup sheet")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    config = Config()
    try:
        record = load_existing(args.existing) if args.existing else MatchRecord()
        record = config.build_parser().parse(read_report(args.report), record)
        if args.lineups:
            record = parse_lineup_sheet(read_report(args.lineups), record, config.get_team_directory())
        if args.stats:
            record = parse_match_stats(read_report(args.stats), record)
    except (OSError, ValueError) as e:
        logger.error("Cannot parse report: %s", e)
        return 1

    print(json.dumps(record.model_dump(by_alias=True), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
