import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

from parsing.match_report_parser import MatchReportParser
from parsing.team_resolver import DEFAULT_TEAMS_PATH, TeamDirectory, load_directory

# Load environment variables from .env file
load_dotenv()


def parse_prefix_map(raw: Optional[str]) -> Dict[str, str]:
    """Parse ``"league:week,cup:kupa"`` into ``{"league": "week", "cup": "kupa"}``."""
    prefixes: Dict[str, str] = {}
    for item in (raw or "").split(","):
        if ":" not in item:
            continue
        competition, prefix = item.split(":", 1)
        if competition.strip() and prefix.strip():
            prefixes[competition.strip()] = prefix.strip()
    return prefixes


class Config:
    # Match report parsing
    MATCH_TIMEZONE = os.getenv("MATCH_TIMEZONE", "Europe/Istanbul")
    DEFAULT_ID_PREFIX = os.getenv("DEFAULT_ID_PREFIX", "week")
    COMPETITION_ID_PREFIXES = parse_prefix_map(os.getenv("COMPETITION_ID_PREFIXES", "league:week,cup:kupa"))

    # Team directory; path to a YAML file of teams, overridable via TEAMS_PATH
    TEAMS_PATH = Path(os.getenv("TEAMS_PATH", str(DEFAULT_TEAMS_PATH)))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FILE = Path(os.getenv("LOG_FILE", str(Path(__file__).parent.parent / "logs" / "server.log")))

    # API server
    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", "8000"))

    def get_team_directory(self) -> TeamDirectory:
        """Load (once per path) the team directory used for name resolution."""
        return load_directory(str(self.TEAMS_PATH))

    def build_parser(self) -> MatchReportParser:
        return MatchReportParser(
            resolver=self.get_team_directory(),
            timezone=self.MATCH_TIMEZONE,
            id_prefix=self.DEFAULT_ID_PREFIX,
            competition_prefixes=self.COMPETITION_ID_PREFIXES,
        )
