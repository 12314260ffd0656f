"""
Heuristic parser for pasted match reports.

Operators paste the text of a federation match page (teams, kick-off, stadium,
officials, both lineups, cards, goals and substitutions) and get a structured
``MatchRecord`` back. Every pass is best effort: anything it cannot recognise
is left as it was in the record handed in, and the operator fixes the rest by
hand.

The text is scanned as a list of trimmed lines, once per concern:

* header      teams, score, kick-off date/time, stadium
* officials   "(Hakem)", "(VAR)", ... role tags
* lineups     roster state machine driven by "İlk 11" / "Yedekler" / "Teknik Sorumlu"
* events      card tally plus goal/substitution sections, split into home and
              away at the second "İlk 11" marker
"""

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from functools import reduce
from typing import List, Mapping, Optional, Tuple
from zoneinfo import ZoneInfo

from .match_ids import (
    DEFAULT_ID_PREFIX,
    DEFAULT_TIMEZONE,
    format_instant,
    generate_match_id,
    is_placeholder_id,
)
from .match_record import MatchEvent, MatchLineups, MatchOfficials, MatchRecord, MatchStats, Player
from .team_resolver import TeamResolver, default_directory
from .text_utils import DOTTED_I_CLASS, marker_pattern, normalize_whitespace, split_lines

logger = logging.getLogger("match_parser")

TEAM_SCAN_LINES = 20
SCORE_SCAN_LINES = 15
DATE_SCAN_LINES = 30
NEXT_LINE_TIME_MAX_LEN = 20
STADIUM_LINE_MAX_LEN = 100
MIN_NAME_LEN = 3

DATE_PATTERN = re.compile(r"(\d{1,2})[./-](\d{1,2})[./-](\d{4})")
TIME_PATTERN = re.compile(r"(\d{1,2}):(\d{2})")
SCORE_TOKEN = re.compile(r"^\d{1,2}$")
NUMERIC_TOKEN = re.compile(r"^\d+$")
PLAYER_LINE = re.compile(r"^(\d+)\.\s+(.+)$")
PLAYER_PREFIX = re.compile(r"^\d+\.")
MINUTE_PATTERN = re.compile(r"\d+(?:\+\d+)?\.dk", re.IGNORECASE)
PARENTHETICAL = re.compile(r"\(.*\)")
STADIUM_PATTERN = re.compile(
    rf"stadyumu|stad{DOTTED_I_CLASS}|\barena\b|\bpark\b", re.IGNORECASE
)

XI_MARKER = marker_pattern("ilk 11")
SUBS_MARKER = marker_pattern("yedekler")
COACH_MARKERS = (marker_pattern("teknik sorumlu"), marker_pattern("teknik direktör"))
TECHNICAL_MARKER = marker_pattern("teknik")
CARDS_MARKER = marker_pattern("kartlar")
GOALS_MARKER = marker_pattern("goller")
SUBS_OUT_MARKER = marker_pattern("oyundan çıkanlar")
SUBS_IN_MARKER = marker_pattern("oyuna girenler")
ROSTER_END_MARKERS = (CARDS_MARKER, GOALS_MARKER, SUBS_OUT_MARKER, SUBS_IN_MARKER)

YELLOW_CARD = marker_pattern("sarı kart")
RED_CARD = marker_pattern("kırmızı kart")
SECOND_YELLOW = marker_pattern("çift sarıdan")

HOME = "home"
AWAY = "away"

SECTION_NONE = "none"
SECTION_XI = "xi"
SECTION_SUBS = "subs"
SECTION_COACH = "coach"

CONTEXT_NONE = "none"
CONTEXT_GOALS = "goals"
CONTEXT_SUBS_OUT = "subsOut"
CONTEXT_SUBS_IN = "subsIn"

CONTEXT_EVENT_TYPES = {
    CONTEXT_GOALS: "goal",
    CONTEXT_SUBS_OUT: "substitution_out",
    CONTEXT_SUBS_IN: "substitution_in",
}


@dataclass(frozen=True)
class RoleTag:
    role: str
    tag: str

    @property
    def pattern(self):
        # Open-ended tags ("(1. Yardımcı") swallow the rest of the parenthesis.
        suffix = "" if self.tag.endswith(")") else r"[^)]*\)?"
        return marker_pattern(self.tag, suffix)


# First match wins, so "(AVAR)" must not be shadowed by anything before it.
OFFICIAL_ROLES = (
    RoleTag("referee", "(hakem)"),
    RoleTag("assistant_1", "(1. yardımcı"),
    RoleTag("assistant_2", "(2. yardımcı"),
    RoleTag("fourth", "(dördüncü"),
    RoleTag("var", "(var)"),
    RoleTag("avar", "(avar)"),
    RoleTag("observer", "(gözlemci)"),
    RoleTag("representative", "(temsilci)"),
)
ROLE_PATTERNS = tuple((role, role.pattern) for role in OFFICIAL_ROLES)
REFEREE_SLOTS = {"referee": 0, "assistant_1": 1, "assistant_2": 2, "fourth": 3}


# ---------------------------------------------------------------- tokenizer
def tokenize(raw_text: str) -> List[str]:
    """Split pasted text into trimmed, non-empty lines."""
    if not raw_text:
        return []
    return split_lines(raw_text)


# ------------------------------------------------------------------- header
@dataclass
class HeaderInfo:
    home_team_id: Optional[str] = None
    away_team_id: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    kickoff: Optional[datetime] = None
    stadium: Optional[str] = None


def detect_teams(lines: List[str], resolver: TeamResolver) -> List[str]:
    """First two distinct resolvable team ids near the top, home first."""
    found: List[str] = []
    for line in lines[:TEAM_SCAN_LINES]:
        if len(found) >= 2:
            break
        if NUMERIC_TOKEN.match(line) or len(line) < MIN_NAME_LEN:
            continue
        team_id = resolver.resolve_team_id(line)
        if team_id and team_id not in found:
            found.append(team_id)
    return found


def detect_score(lines: List[str]) -> Optional[Tuple[int, int]]:
    # Shirt numbers on their own line this early will be mistaken for goals.
    numbers = [int(line) for line in lines[:SCORE_SCAN_LINES] if SCORE_TOKEN.match(line)]
    if len(numbers) < 2:
        return None
    return numbers[0], numbers[1]


def detect_kickoff(lines: List[str], tz: str = DEFAULT_TIMEZONE) -> Optional[datetime]:
    """Last valid ``D.M.YYYY [H:MM]`` in the first lines, as an aware datetime.

    The time is taken from the same line, else from a short following line,
    else defaults to midnight.
    """
    zone = ZoneInfo(tz)
    kickoff = None
    for i, line in enumerate(lines[:DATE_SCAN_LINES]):
        date_match = DATE_PATTERN.search(line)
        if not date_match:
            continue

        hour, minute = 0, 0
        time_match = TIME_PATTERN.search(line)
        if not time_match and i + 1 < len(lines):
            next_line = lines[i + 1]
            candidate = TIME_PATTERN.search(next_line)
            if candidate and len(next_line) < NEXT_LINE_TIME_MAX_LEN:
                time_match = candidate
        if time_match:
            hour, minute = int(time_match.group(1)), int(time_match.group(2))

        day, month, year = (int(g) for g in date_match.groups())
        try:
            candidate = datetime(year, month, day, hour, minute, tzinfo=zone)
            # Years at the edge of the calendar cannot be shifted to UTC.
            candidate.astimezone(timezone.utc)
            kickoff = candidate
        except (ValueError, OverflowError):
            logger.debug("Skipping invalid date/time on line %d: %r", i, line)
    return kickoff


def detect_stadium(lines: List[str]) -> Optional[str]:
    stadium = None
    for line in lines:
        if len(line) < STADIUM_LINE_MAX_LEN and STADIUM_PATTERN.search(line):
            stadium = line.split(" - ")[0].strip()
    return stadium


def extract_header(lines: List[str], resolver: TeamResolver, tz: str = DEFAULT_TIMEZONE) -> HeaderInfo:
    header = HeaderInfo()
    teams = detect_teams(lines, resolver)
    if len(teams) >= 2:
        header.home_team_id, header.away_team_id = teams[0], teams[1]
    score = detect_score(lines)
    if score:
        header.home_score, header.away_score = score
    header.kickoff = detect_kickoff(lines, tz)
    header.stadium = detect_stadium(lines)
    logger.debug("Header: teams=%s kickoff=%s stadium=%s", teams, header.kickoff, header.stadium)
    return header


# ---------------------------------------------------------------- officials
@dataclass
class OfficialsResult:
    officials: MatchOfficials
    referee: Optional[str] = None
    var_referee: Optional[str] = None


def match_role(line: str) -> Optional[Tuple[str, str]]:
    """Return ``(role, name)`` for a line carrying an officials role tag."""
    for tag, pattern in ROLE_PATTERNS:
        if pattern.search(line):
            return tag.role, normalize_whitespace(pattern.sub("", line, count=1))
    return None


def extract_officials(lines: List[str], existing: Optional[MatchOfficials] = None) -> OfficialsResult:
    officials = existing.model_copy(deep=True) if existing else MatchOfficials()
    while len(officials.referees) < len(REFEREE_SLOTS):
        officials.referees.append("")
    result = OfficialsResult(officials=officials)

    for line in lines:
        matched = match_role(line)
        if not matched:
            continue
        role, name = matched
        if role in REFEREE_SLOTS:
            officials.referees[REFEREE_SLOTS[role]] = name
            if role == "referee":
                result.referee = name
        elif role in ("var", "avar"):
            # The VAR tag is repeated across report sections for the same person.
            if name not in officials.var_referees:
                officials.var_referees.append(name)
            if role == "var":
                result.var_referee = name
        elif role == "observer":
            officials.observers.append(name)
        elif role == "representative":
            officials.representatives.append(name)
    return result


# ------------------------------------------------------------------ lineups
@dataclass(frozen=True)
class RosterCursor:
    """Where the roster scan currently is: which team and which sub-section."""

    team: str = HOME
    section: str = SECTION_NONE
    xi_seen: bool = False
    coach_open: bool = False


@dataclass
class LineupResult:
    home: List[Player] = field(default_factory=list)
    away: List[Player] = field(default_factory=list)
    home_subs: List[Player] = field(default_factory=list)
    away_subs: List[Player] = field(default_factory=list)
    home_coach: str = ""
    away_coach: str = ""

    def players_for(self, team: str, section: str) -> List[Player]:
        if section == SECTION_XI:
            return self.home if team == HOME else self.away
        return self.home_subs if team == HOME else self.away_subs

    def coach_for(self, team: str) -> str:
        return self.home_coach if team == HOME else self.away_coach

    def set_coach(self, team: str, name: str) -> None:
        if team == HOME:
            self.home_coach = name
        else:
            self.away_coach = name

    def to_model(self) -> MatchLineups:
        return MatchLineups(
            home=self.home,
            away=self.away,
            home_subs=self.home_subs,
            away_subs=self.away_subs,
            home_coach=self.home_coach,
            away_coach=self.away_coach,
        )


def roster_transition(cursor: RosterCursor, line: str) -> Optional[RosterCursor]:
    """Cursor after a section marker line, or None if ``line`` is not a marker.

    The first "İlk 11" opens the home block and every later one the away block.
    """
    if XI_MARKER.search(line):
        team = AWAY if cursor.xi_seen else HOME
        return replace(cursor, team=team, section=SECTION_XI, xi_seen=True, coach_open=False)
    if SUBS_MARKER.search(line):
        return replace(cursor, section=SECTION_SUBS, coach_open=False)
    if any(p.search(line) for p in COACH_MARKERS):
        return replace(cursor, section=SECTION_COACH, coach_open=True)
    if any(p.search(line) for p in ROSTER_END_MARKERS):
        return replace(cursor, section=SECTION_NONE, coach_open=False)
    return None


def _roster_step(state: Tuple[RosterCursor, LineupResult], line: str) -> Tuple[RosterCursor, LineupResult]:
    cursor, lineup = state
    moved = roster_transition(cursor, line)
    if moved is not None:
        return moved, lineup

    if cursor.section in (SECTION_XI, SECTION_SUBS):
        player_match = PLAYER_LINE.match(line)
        if player_match:
            player = Player(number=player_match.group(1), name=player_match.group(2).strip())
            lineup.players_for(cursor.team, cursor.section).append(player)
    elif cursor.section == SECTION_COACH and cursor.coach_open:
        if PLAYER_PREFIX.match(line) or len(line) < MIN_NAME_LEN:
            return cursor, lineup
        if not lineup.coach_for(cursor.team):
            lineup.set_coach(cursor.team, line)
        # Only the first line after the marker is the coach; notes follow.
        return replace(cursor, coach_open=False), lineup
    return cursor, lineup


def extract_lineups(lines: List[str]) -> LineupResult:
    _, lineup = reduce(_roster_step, lines, (RosterCursor(), LineupResult()))
    return lineup


# ------------------------------------------------------------------- events
@dataclass
class CardTally:
    home_yellow: int = 0
    away_yellow: int = 0
    home_red: int = 0
    away_red: int = 0
    events: List[MatchEvent] = field(default_factory=list)


def find_boundary_index(lines: List[str]) -> int:
    """Index of the second "İlk 11" marker; lines before it belong to home."""
    xi_indices = [i for i, line in enumerate(lines) if XI_MARKER.search(line)]
    return xi_indices[1] if len(xi_indices) > 1 else len(lines)


def _side(index: int, boundary: int) -> str:
    return HOME if index < boundary else AWAY


def scan_cards(lines: List[str], boundary: int) -> CardTally:
    """Count card keywords per side and emit card events that carry a minute.

    Every keyword hit is counted, so the tallies can exceed the number of card
    events (a line without "NN.dk" adds to the count but yields no event).
    """
    tally = CardTally()
    for index, line in enumerate(lines):
        side = _side(index, boundary)
        if YELLOW_CARD.search(line):
            if side == HOME:
                tally.home_yellow += 1
            else:
                tally.away_yellow += 1
            rest = YELLOW_CARD.sub("", line, count=1).strip()
            event_type = "yellow_card"
        elif RED_CARD.search(line):
            if side == HOME:
                tally.home_red += 1
            else:
                tally.away_red += 1
            rest = RED_CARD.sub("", line, count=1)
            rest = SECOND_YELLOW.sub("", rest, count=1).strip()
            event_type = "red_card"
        else:
            continue

        minute_match = MINUTE_PATTERN.search(rest)
        if minute_match:
            minute = minute_match.group(0)
            player = normalize_whitespace(rest.replace(minute, "", 1))
            tally.events.append(MatchEvent(type=event_type, minute=minute, player=player, team_id=side))
    return tally


def event_context_for(line: str) -> Optional[str]:
    """New event context if ``line`` is a section header, else None."""
    if GOALS_MARKER.search(line):
        return CONTEXT_GOALS
    if CARDS_MARKER.search(line):
        return CONTEXT_NONE
    if SUBS_OUT_MARKER.search(line):
        return CONTEXT_SUBS_OUT
    if SUBS_IN_MARKER.search(line):
        return CONTEXT_SUBS_IN
    # Roster headers reappear between event lists; they close any open list.
    if SUBS_MARKER.search(line) or XI_MARKER.search(line) or TECHNICAL_MARKER.search(line):
        return CONTEXT_NONE
    return None


def scan_section_events(lines: List[str], boundary: int) -> List[MatchEvent]:
    events: List[MatchEvent] = []
    context = CONTEXT_NONE
    for index, line in enumerate(lines):
        new_context = event_context_for(line)
        if new_context is not None:
            context = new_context
            continue

        minute_match = MINUTE_PATTERN.search(line)
        if not minute_match or context not in CONTEXT_EVENT_TYPES:
            continue
        minute = minute_match.group(0)
        player = PARENTHETICAL.sub("", line.replace(minute, "", 1))
        events.append(
            MatchEvent(
                type=CONTEXT_EVENT_TYPES[context],
                minute=minute,
                player=normalize_whitespace(player),
                team_id=_side(index, boundary),
            )
        )
    return events


# ---------------------------------------------------------------- assembler
class MatchReportParser:
    """Turn a pasted match report into an updated ``MatchRecord``.

    The resolver is injected so tests and other leagues can supply their own
    team dictionary. The caller's record is never modified.
    """

    def __init__(
        self,
        resolver: Optional[TeamResolver] = None,
        timezone: str = DEFAULT_TIMEZONE,
        id_prefix: str = DEFAULT_ID_PREFIX,
        competition_prefixes: Optional[Mapping[str, str]] = None,
    ):
        self.resolver = resolver if resolver is not None else default_directory()
        self.timezone = timezone
        self.id_prefix = id_prefix
        self.competition_prefixes = dict(competition_prefixes or {})
        ZoneInfo(timezone)  # fail fast on a misconfigured zone
        self.logger = logging.getLogger(self.__class__.__name__)

    def parse(self, raw_text: str, existing: Optional[MatchRecord] = None) -> MatchRecord:
        if existing is None:
            existing = MatchRecord()
        if not raw_text or not raw_text.strip():
            return existing

        lines = tokenize(raw_text)
        header = extract_header(lines, self.resolver, self.timezone)
        officials = extract_officials(lines, existing.officials)
        lineup = extract_lineups(lines)
        boundary = find_boundary_index(lines)
        tally = scan_cards(lines, boundary)
        section_events = scan_section_events(lines, boundary)

        record = self.assemble(existing, header, officials, lineup, tally, section_events)
        self.logger.info(
            "Parsed report: %d lines, teams=%s-%s, players=%d/%d, events=%d, id=%s",
            len(lines),
            record.home_team_id or "?",
            record.away_team_id or "?",
            len(record.lineups.home),
            len(record.lineups.away),
            len(record.events),
            record.id or "-",
        )
        return record

    def assemble(
        self,
        existing: MatchRecord,
        header: HeaderInfo,
        officials: OfficialsResult,
        lineup: LineupResult,
        tally: CardTally,
        section_events: List[MatchEvent],
    ) -> MatchRecord:
        record = existing.model_copy(deep=True)
        if record.stats is None:
            record.stats = MatchStats()

        if header.home_team_id and header.away_team_id:
            record.home_team_id = header.home_team_id
            record.home_team_name = self.resolver.get_team_name(header.home_team_id)
            record.away_team_id = header.away_team_id
            record.away_team_name = self.resolver.get_team_name(header.away_team_id)
        else:
            self.logger.debug("Fewer than two teams recognised; keeping existing teams")

        if header.home_score is not None and header.away_score is not None:
            record.home_score = header.home_score
            record.away_score = header.away_score
            record.score = f"{header.home_score}-{header.away_score}"
        if header.kickoff is not None:
            record.date = format_instant(header.kickoff)
        if header.stadium:
            record.stadium = header.stadium

        record.officials = officials.officials
        if officials.referee is not None:
            record.referee = officials.referee
        if officials.var_referee is not None:
            record.var_referee = officials.var_referee

        # A new paste supersedes any lineup typed in by hand.
        record.lineups = lineup.to_model()

        record.events = list(tally.events) + list(section_events)
        record.stats.home_yellow_cards = tally.home_yellow
        record.stats.away_yellow_cards = tally.away_yellow
        record.stats.home_red_cards = tally.home_red
        record.stats.away_red_cards = tally.away_red

        if is_placeholder_id(record.id):
            new_id = generate_match_id(record, self.timezone, self.id_prefix, self.competition_prefixes)
            if new_id:
                record.id = new_id
        return record


def parse_match_report(
    raw_text: str,
    existing: Optional[MatchRecord] = None,
    resolver: Optional[TeamResolver] = None,
    **options,
) -> MatchRecord:
    """Parse ``raw_text`` into a copy of ``existing``; blank text returns ``existing``."""
    return MatchReportParser(resolver, **options).parse(raw_text, existing)
