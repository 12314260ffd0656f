"""
Parser for broadcast lineup sheets.

Broadcasters print both lineups side by side, so a pasted row reads
``1 MUSLERA LIVAKOVIC 40`` (home number, home name, away name, away number).
Depending on the page the four cells may also arrive on separate lines; the
row buffer below stitches them back together.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .match_record import MatchLineups, MatchRecord, Player
from .team_resolver import TeamResolver, default_directory
from .text_utils import marker_pattern, split_lines

logger = logging.getLogger("lineup_sheet_parser")

FULL_ROW = re.compile(r"^(\d+)\s+(.+?)\s+(.+?)\s+(\d+)$")
NUMBER_FIRST = re.compile(r"^(\d+)\s+(.+)$")
NUMBER_LAST = re.compile(r"^(.+?)\s+(\d+)$")
NUMBER_ONLY = re.compile(r"^(\d+)$")
TD_ONLY = re.compile(r"^t\.?d\.?$", re.IGNORECASE)
COACH_LABEL = re.compile(r"teknik\s+direkt[öo]r|teknik\s+sorumlusu|t\.d\.|t\.d|\btd\b", re.IGNORECASE)
COACH_SPLIT = re.compile(r"\s{2,}|\t")
TEAM_SEPARATORS = (" - ", " vs ")

SUBS_MARKER = marker_pattern("yedekler")
COACH_MARKERS = (marker_pattern("teknik direktör"), marker_pattern("teknik sorumlusu"))
TEAM_SKIP_MARKERS = (marker_pattern("teknik"), SUBS_MARKER)


def detect_sheet_teams(lines: List[str], resolver: TeamResolver) -> Optional[Tuple[str, str]]:
    """Teams from a "Home - Away" line, else the first two resolvable names."""
    for line in lines:
        for separator in TEAM_SEPARATORS:
            if separator not in line:
                continue
            parts = line.split(separator)
            if len(parts) == 2:
                home = resolver.resolve_team_id(parts[0])
                away = resolver.resolve_team_id(parts[1])
                if home and away:
                    return home, away
            break

    ordered: List[str] = []
    for line in lines:
        if re.search(r"\d", line) or any(p.search(line) for p in TEAM_SKIP_MARKERS):
            continue
        team_id = resolver.resolve_team_id(line)
        if team_id and team_id not in ordered:
            ordered.append(team_id)
    if len(ordered) >= 2:
        return ordered[0], ordered[1]
    return None


@dataclass
class SheetState:
    section: str = "xi"
    home_number: Optional[str] = None
    home_name: Optional[str] = None
    away_name: Optional[str] = None
    home: List[Player] = field(default_factory=list)
    away: List[Player] = field(default_factory=list)
    home_subs: List[Player] = field(default_factory=list)
    away_subs: List[Player] = field(default_factory=list)
    home_coach: str = ""
    away_coach: str = ""

    def reset_row(self) -> None:
        self.home_number = self.home_name = self.away_name = None

    def flush_row(self, away_number: Optional[str]) -> None:
        if self.home_number and self.home_name:
            home_target = self.home if self.section == "xi" else self.home_subs
            away_target = self.away if self.section == "xi" else self.away_subs
            home_target.append(Player(number=self.home_number, name=self.home_name))
            if away_number or self.away_name:
                away_target.append(Player(number=away_number or "", name=self.away_name or ""))
        self.reset_row()

    def feed_row_cell(self, line: str) -> None:
        full = FULL_ROW.match(line)
        if full:
            self.home_number, self.home_name, self.away_name = full.group(1), full.group(2), full.group(3)
            self.flush_row(full.group(4))
            return

        number_only = NUMBER_ONLY.match(line)
        number_first = NUMBER_FIRST.match(line)
        number_last = NUMBER_LAST.match(line)
        if number_only:
            if not self.home_number:
                self.home_number = number_only.group(1)
            else:
                self.flush_row(number_only.group(1))
        elif number_first:
            if not self.home_number:
                self.home_number, self.home_name = number_first.group(1), number_first.group(2)
            else:
                self.away_name = number_first.group(2)
                self.flush_row(number_first.group(1))
        elif number_last:
            if not self.home_number:
                self.home_number, self.home_name = number_last.group(2), number_last.group(1)
            else:
                self.away_name = number_last.group(1)
                self.flush_row(number_last.group(2))
        elif self.home_number and not self.home_name:
            self.home_name = line
        elif self.home_number and self.home_name and not self.away_name:
            self.away_name = line

    def feed_coach(self, line: str) -> None:
        clean = COACH_LABEL.sub("", line).strip()
        clean = clean.strip(":- \t")
        if len(clean) < 3 or TD_ONLY.match(clean):
            return
        parts = COACH_SPLIT.split(clean)
        if len(parts) >= 2:
            self.home_coach, self.away_coach = parts[0].strip(), parts[1].strip()
        elif not self.home_coach:
            self.home_coach = clean
        elif not self.away_coach:
            self.away_coach = clean


def parse_lineup_sheet(
    raw_text: str,
    existing: Optional[MatchRecord] = None,
    resolver: Optional[TeamResolver] = None,
) -> MatchRecord:
    """Replace both lineups from a pasted broadcast sheet.

    Coaches fall back to the ones already on the record when the sheet has none.
    """
    if existing is None:
        existing = MatchRecord()
    if not raw_text or not raw_text.strip():
        return existing
    resolver = resolver if resolver is not None else default_directory()

    lines = split_lines(raw_text)
    record = existing.model_copy(deep=True)
    previous = record.lineups or MatchLineups()

    teams = detect_sheet_teams(lines, resolver)
    if teams:
        record.home_team_id, record.away_team_id = teams
        record.home_team_name = resolver.get_team_name(teams[0])
        record.away_team_name = resolver.get_team_name(teams[1])

    state = SheetState()
    for line in lines:
        if SUBS_MARKER.search(line):
            state.reset_row()
            state.section = "subs"
            continue
        if any(p.search(line) for p in COACH_MARKERS) or TD_ONLY.match(line):
            state.reset_row()
            state.section = "coach"
            continue
        if state.section == "coach":
            state.feed_coach(line)
        else:
            state.feed_row_cell(line)

    record.lineups = MatchLineups(
        home=state.home,
        away=state.away,
        home_subs=state.home_subs,
        away_subs=state.away_subs,
        home_coach=state.home_coach or previous.home_coach,
        away_coach=state.away_coach or previous.away_coach,
    )
    logger.debug(
        "Lineup sheet: %d/%d starters, %d/%d subs",
        len(state.home), len(state.away), len(state.home_subs), len(state.away_subs),
    )
    return record
