"""
Pydantic request/response models for the match desk API
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from parsing.match_record import MatchRecord, RecordModel


class ParseRequest(RecordModel):
    """Pasted text plus the record currently being edited"""
    text: str = Field(description="Raw pasted text")
    match: Optional[MatchRecord] = Field(None, description="Record to merge into; empty record if omitted")


class AutofillRequest(RecordModel):
    """Record whose typed id should be expanded into week and teams"""
    match: MatchRecord


class TeamResolution(RecordModel):
    query: str
    team_id: Optional[str] = Field(None, description="Canonical team id, null when unresolved")
    team_name: Optional[str] = None


class TeamSummary(BaseModel):
    id: str
    name: str
    short: str
    aliases: List[str] = Field(default_factory=list)
    colors: Dict[str, str] = Field(default_factory=dict)


class HealthStatus(BaseModel):
    status: str
    teams_loaded: int
