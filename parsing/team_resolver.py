"""
Team identity resolution for pasted match reports.

The parsers only depend on the ``TeamResolver`` protocol. ``TeamDirectory`` is
the bundled implementation backed by a YAML file of teams (id, display name,
three-letter short code, aliases, colors).
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Tuple, Union

import yaml

from .text_utils import normalize_key

logger = logging.getLogger("team_resolver")

DEFAULT_TEAMS_PATH = Path(__file__).parent / "teams.yaml"
DEFAULT_COLORS = {"primary": "#333333", "secondary": "#cccccc"}


class TeamDirectoryError(ValueError):
    """Raised when a team directory file cannot be loaded."""


class TeamResolver(Protocol):
    def resolve_team_id(self, text: str) -> Optional[str]:
        ...

    def get_team_name(self, team_id: str) -> str:
        ...


@dataclass(frozen=True)
class TeamEntry:
    id: str
    name: str
    short: str
    aliases: Tuple[str, ...] = ()
    colors: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COLORS))


class TeamDirectory:
    """Resolve free-text fragments to canonical team ids.

    Lookup order: short code, alias (exact or normalized), id, then a
    bidirectional substring check on normalized display names.
    """

    def __init__(self, teams: Iterable[TeamEntry]):
        self._teams: Dict[str, TeamEntry] = {}
        for team in teams:
            self._teams[team.id] = team
        self._normalized_names = {tid: normalize_key(t.name) for tid, t in self._teams.items()}
        self._normalized_aliases = {
            tid: {normalize_key(alias) for alias in t.aliases} for tid, t in self._teams.items()
        }

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "TeamDirectory":
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as exc:
            raise TeamDirectoryError(f"Cannot read team directory {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise TeamDirectoryError(f"Invalid YAML in team directory {path}: {exc}") from exc

        rows = data.get("teams") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise TeamDirectoryError(f"Team directory {path} must contain a 'teams' list")

        entries: List[TeamEntry] = []
        for row in rows:
            if not isinstance(row, dict) or not row.get("id") or not row.get("name"):
                raise TeamDirectoryError(f"Team entry without id/name in {path}: {row!r}")
            colors = dict(DEFAULT_COLORS)
            colors.update(row.get("colors") or {})
            entries.append(
                TeamEntry(
                    id=str(row["id"]),
                    name=str(row["name"]),
                    short=str(row.get("short") or row["id"]),
                    aliases=tuple(str(a).lower() for a in row.get("aliases") or ()),
                    colors=colors,
                )
            )
        logger.debug("Loaded %d teams from %s", len(entries), path)
        return cls(entries)

    def teams(self) -> List[TeamEntry]:
        return list(self._teams.values())

    def get_team_name(self, team_id: str) -> str:
        team = self._teams.get(team_id)
        return team.name if team else team_id

    def get_team_colors(self, team_id: str) -> Dict[str, str]:
        team = self._teams.get(team_id)
        return dict(team.colors) if team else dict(DEFAULT_COLORS)

    def resolve_team_id(self, text: str) -> Optional[str]:
        if not text:
            return None
        search = text.lower().strip()
        search_norm = normalize_key(search)

        for team_id, team in self._teams.items():
            if team.short == search:
                return team_id
            if search in team.aliases:
                return team_id
            if search_norm and search_norm in self._normalized_aliases[team_id]:
                return team_id

        if search in self._teams:
            return search

        # An empty key is a substring of every name; never treat it as a hit.
        if not search_norm:
            return None
        for team_id, name_norm in self._normalized_names.items():
            if search_norm in name_norm or name_norm in search_norm:
                return team_id
        return None


@lru_cache(maxsize=None)
def load_directory(path: str) -> TeamDirectory:
    return TeamDirectory.from_yaml(path)


def default_directory() -> TeamDirectory:
    return load_directory(str(DEFAULT_TEAMS_PATH))
