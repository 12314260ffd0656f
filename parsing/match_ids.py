"""
Derived match document ids.

Template: ``{prefix}{week}[-{group}]-{home}-{away}-{yyyy-mm-dd}`` where the date
is the kick-off day in the match timezone, e.g. ``week21-gal-fen-2026-01-30``.
"""
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Optional
from zoneinfo import ZoneInfo

from .match_record import MatchRecord
from .team_resolver import TeamResolver

logger = logging.getLogger("match_ids")

DEFAULT_ID_PREFIX = "week"
DEFAULT_TIMEZONE = "Europe/Istanbul"
PLACEHOLDER_MARKER = "takim-takim"

COMPACT_ID = re.compile(r"^w(\d+)([a-z]{3})([a-z]{3})$")


@dataclass
class MatchIdParts:
    week: Optional[int]
    home: str
    away: str


def is_placeholder_id(match_id: Optional[str]) -> bool:
    """True for ids an operator has not finalized yet (empty or week1-takim-takim...)."""
    return not match_id or PLACEHOLDER_MARKER in match_id


def parse_instant(value: Optional[str], tz: str = DEFAULT_TIMEZONE) -> Optional[datetime]:
    """Parse a stored ISO date into an aware datetime in ``tz``.

    Naive values are taken to be already in match-local time.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparsable match date %r", value)
        return None
    zone = ZoneInfo(tz)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=zone)
    try:
        return parsed.astimezone(zone)
    except OverflowError:
        logger.debug("Match date out of range %r", value)
        return None


def format_instant(local: datetime) -> str:
    """Serialize an aware datetime as a UTC instant: 2026-01-30T17:00:00.000Z."""
    utc = local.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def id_prefix_for(
    competition: Optional[str],
    default_prefix: str = DEFAULT_ID_PREFIX,
    competition_prefixes: Optional[Mapping[str, str]] = None,
) -> str:
    if competition and competition_prefixes:
        return competition_prefixes.get(competition, default_prefix)
    return default_prefix


def generate_match_id(
    record: MatchRecord,
    tz: str = DEFAULT_TIMEZONE,
    default_prefix: str = DEFAULT_ID_PREFIX,
    competition_prefixes: Optional[Mapping[str, str]] = None,
) -> str:
    """Build the canonical id, or fall back to the record's current id."""
    week = record.week or 1
    kickoff = parse_instant(record.date, tz)
    if not (record.home_team_id and record.away_team_id and kickoff):
        return record.id or ""

    prefix = id_prefix_for(record.competition, default_prefix, competition_prefixes)
    head = f"{prefix}{week}"
    if record.group:
        head += f"-{record.group}"
    return f"{head}-{record.home_team_id}-{record.away_team_id}-{kickoff:%Y-%m-%d}"


def split_match_id(match_id: str) -> MatchIdParts:
    """Split an operator-typed id into week and team fragments.

    Accepts ``week3-gal-fen[-2026-01-30]``, ``gal-fen`` and the compact
    ``w3galfen`` form.
    """
    text = (match_id or "").lower().strip()
    compact = COMPACT_ID.match(text)
    if compact:
        return MatchIdParts(int(compact.group(1)), compact.group(2), compact.group(3))

    parts = text.split("-")
    if len(parts) < 2:
        return MatchIdParts(None, "", "")
    if parts[0].startswith("week"):
        digits = parts[0][len("week"):]
        week = int(digits) if digits.isdigit() else None
        return MatchIdParts(week, parts[1], parts[2] if len(parts) > 2 else "")
    return MatchIdParts(None, parts[0], parts[1])


def autofill_from_id(
    record: MatchRecord,
    resolver: TeamResolver,
    tz: str = DEFAULT_TIMEZONE,
    default_prefix: str = DEFAULT_ID_PREFIX,
) -> MatchRecord:
    """Fill week and teams from the typed id and rewrite it in canonical form."""
    if not (record.id or "").strip():
        return record

    updated = record.model_copy(deep=True)
    parts = split_match_id(record.id)
    week = parts.week if parts.week is not None else (record.week or 1)
    updated.week = week

    home_id = parts.home
    away_id = parts.away
    if parts.home:
        resolved = resolver.resolve_team_id(parts.home)
        if resolved:
            updated.home_team_id = resolved
            updated.home_team_name = resolver.get_team_name(resolved)
            home_id = resolved
    if parts.away:
        resolved = resolver.resolve_team_id(parts.away)
        if resolved:
            updated.away_team_id = resolved
            updated.away_team_name = resolver.get_team_name(resolved)
            away_id = resolved

    new_id = f"{default_prefix}{week}"
    if home_id:
        new_id += f"-{home_id}"
    if away_id:
        new_id += f"-{away_id}"
    kickoff = parse_instant(record.date, tz)
    if home_id and away_id and kickoff:
        new_id += f"-{kickoff:%Y-%m-%d}"
    updated.id = new_id
    logger.debug("Autofilled match id %r -> %r", record.id, new_id)
    return updated
