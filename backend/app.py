from fastapi import FastAPI, HTTPException, Query
from typing import List, Optional
import logging

from parsing.lineup_sheet_parser import parse_lineup_sheet
from parsing.match_ids import autofill_from_id
from parsing.match_record import MatchRecord
from parsing.match_report_parser import MatchReportParser
from parsing.match_stats_parser import parse_match_stats
from parsing.team_resolver import TeamDirectory
from .config import Config
from .models import AutofillRequest, HealthStatus, ParseRequest, TeamResolution, TeamSummary

# Setup logging
logger = logging.getLogger("app")
if not logger.handlers:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

app = FastAPI(title="Match Report Desk")

config = Config()

# Initialize services
team_directory: Optional[TeamDirectory] = None
report_parser: Optional[MatchReportParser] = None


@app.on_event("startup")
async def startup_event():
    """Load the team directory and build the report parser"""
    global team_directory, report_parser
    try:
        team_directory = config.get_team_directory()
        report_parser = config.build_parser()
        logger.info("Report parser initialized with %d teams from %s", len(team_directory.teams()), config.TEAMS_PATH)
    except Exception as e:
        logger.error(f"Failed to initialize report parser: {e}")
        team_directory = None
        report_parser = None


def _require_parser() -> MatchReportParser:
    if report_parser is None or team_directory is None:
        raise HTTPException(
            status_code=503,
            detail="Report parser not initialized. Please check TEAMS_PATH and MATCH_TIMEZONE."
        )
    return report_parser


@app.get("/health", response_model=HealthStatus)
async def health_check():
    """Health check endpoint"""
    return HealthStatus(
        status="healthy" if report_parser is not None else "degraded",
        teams_loaded=len(team_directory.teams()) if team_directory else 0,
    )


# ==================== Team Endpoints ====================

@app.get("/teams", response_model=List[TeamSummary])
async def list_teams():
    """List the teams known to the resolver"""
    _require_parser()
    return [
        TeamSummary(id=t.id, name=t.name, short=t.short, aliases=list(t.aliases), colors=dict(t.colors))
        for t in team_directory.teams()
    ]


@app.get("/teams/resolve", response_model=TeamResolution)
async def resolve_team(q: str = Query(..., description="Free-text team name, alias or short code")):
    """Resolve a team name fragment to its canonical id"""
    _require_parser()
    team_id = team_directory.resolve_team_id(q)
    return TeamResolution(
        query=q,
        team_id=team_id,
        team_name=team_directory.get_team_name(team_id) if team_id else None,
    )


# ==================== Match Endpoints ====================

@app.post("/matches/parse", response_model=MatchRecord)
async def parse_report(request: ParseRequest):
    """Parse a pasted match report into the submitted record"""
    parser = _require_parser()
    try:
        record = parser.parse(request.text, request.match or MatchRecord())
        logger.info("Report parsed: id=%s events=%s", record.id, len(record.events or []))
        return record
    except Exception as e:
        logger.error(f"Report parse error: {e}")
        raise HTTPException(status_code=500, detail=f"Report parsing failed: {str(e)}")


@app.post("/matches/parse/stats", response_model=MatchRecord)
async def parse_stats(request: ParseRequest):
    """Parse a pasted statistics block into the submitted record"""
    _require_parser()
    try:
        return parse_match_stats(request.text, request.match or MatchRecord())
    except Exception as e:
        logger.error(f"Stats parse error: {e}")
        raise HTTPException(status_code=500, detail=f"Stats parsing failed: {str(e)}")


@app.post("/matches/parse/lineups", response_model=MatchRecord)
async def parse_lineups(request: ParseRequest):
    """Parse a broadcast lineup sheet into the submitted record"""
    _require_parser()
    try:
        return parse_lineup_sheet(request.text, request.match or MatchRecord(), team_directory)
    except Exception as e:
        logger.error(f"Lineup parse error: {e}")
        raise HTTPException(status_code=500, detail=f"Lineup parsing failed: {str(e)}")


@app.post("/matches/autofill-id", response_model=MatchRecord)
async def autofill_id(request: AutofillRequest):
    """Expand a typed match id (e.g. w3galfen) into week, teams and canonical id"""
    _require_parser()
    if not request.match.id.strip():
        raise HTTPException(status_code=400, detail="Match id is empty")
    return autofill_from_id(
        request.match,
        team_directory,
        config.MATCH_TIMEZONE,
        config.DEFAULT_ID_PREFIX,
    )
