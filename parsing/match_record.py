"""
Pydantic models for the match record produced by the report parsers.

Attributes are snake_case in Python and camelCase on the wire (homeTeamId,
varReferees, ...), matching the documents stored per match id.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EventType = Literal["goal", "yellow_card", "red_card", "substitution_in", "substitution_out"]
Side = Literal["home", "away"]


class RecordModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Player(RecordModel):
    number: str = Field(description="Shirt number as printed in the report")
    name: str


class MatchLineups(RecordModel):
    home: List[Player] = Field(default_factory=list)
    away: List[Player] = Field(default_factory=list)
    home_subs: List[Player] = Field(default_factory=list)
    away_subs: List[Player] = Field(default_factory=list)
    home_coach: str = ""
    away_coach: str = ""


class MatchOfficials(RecordModel):
    referees: List[str] = Field(
        default_factory=lambda: ["", "", "", ""],
        description="[main, 1st assistant, 2nd assistant, fourth official]",
    )
    var_referees: List[str] = Field(default_factory=list, description="VAR first, then AVARs")
    observers: List[str] = Field(default_factory=list)
    representatives: List[str] = Field(default_factory=list)


class MatchEvent(RecordModel):
    type: EventType
    minute: str = Field(description="Minute as written, e.g. '45+2.dk'")
    player: str
    team_id: Side


class MatchStats(RecordModel):
    home_possession: Optional[float] = None
    away_possession: Optional[float] = None
    home_shots: Optional[int] = None
    away_shots: Optional[int] = None
    home_shots_on_target: Optional[int] = None
    away_shots_on_target: Optional[int] = None
    home_big_chances: Optional[int] = None
    away_big_chances: Optional[int] = None
    home_corners: Optional[int] = None
    away_corners: Optional[int] = None
    home_offsides: Optional[int] = None
    away_offsides: Optional[int] = None
    home_saves: Optional[int] = None
    away_saves: Optional[int] = None
    home_fouls: Optional[int] = None
    away_fouls: Optional[int] = None
    home_yellow_cards: Optional[int] = None
    away_yellow_cards: Optional[int] = None
    home_red_cards: Optional[int] = None
    away_red_cards: Optional[int] = None


class MatchRecord(RecordModel):
    """A (possibly partial) match document keyed by its derived id."""

    id: str = ""
    home_team_id: str = ""
    away_team_id: str = ""
    home_team_name: str = ""
    away_team_name: str = ""
    date: Optional[str] = Field(None, description="UTC ISO-8601 instant")
    week: Optional[int] = None
    season: Optional[str] = None
    competition: Optional[str] = None
    group: Optional[str] = None
    status: Optional[str] = None
    stadium: Optional[str] = None
    referee: Optional[str] = None
    var_referee: Optional[str] = None
    score: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    stats: Optional[MatchStats] = None
    officials: Optional[MatchOfficials] = None
    lineups: Optional[MatchLineups] = None
    events: Optional[List[MatchEvent]] = None
