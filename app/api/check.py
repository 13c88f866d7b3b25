"""
Steam Trust Check - Check API

Public endpoints (no auth):
    POST /api/check    - Resolve a profile, score it, explain the verdict
    GET  /api/titles   - Featured games offered for the per-game hours check

This is the only place internal failures become caller-facing messages.
"""
from typing import Optional, Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, AliasChoices
import structlog

from app.compute.pipeline import ProfileChecker
from app.errors import CheckError, describe
from app.trust.titles import FEATURED_TITLES

logger = structlog.get_logger()


# =============================================
# REQUEST MODELS
# =============================================

class CheckRequest(BaseModel):
    """
    `input` is a profile URL, vanity name or SteamID64. A selected game is
    optional; its name is display-only and never checked against Steam.
    Keys are snake_case like the response; the camelCase spellings older
    clients send are accepted as aliases.
    """
    model_config = ConfigDict(populate_by_name=True)

    input: Optional[str] = None
    selected_title_id: Optional[int] = Field(
        None,
        ge=1,
        validation_alias=AliasChoices("selected_title_id", "selectedTitleId", "selectedAppId"),
    )
    selected_title_name: Optional[str] = Field(
        None,
        max_length=200,
        validation_alias=AliasChoices("selected_title_name", "selectedTitleName", "selectedGameName"),
    )


# =============================================
# ERROR RESPONSES
# =============================================

def error_body(kind: str, message: str, status: int) -> Dict[str, Any]:
    return {"error": kind, "message": message, "status": status}


def check_error_response(error: CheckError) -> JSONResponse:
    status, message = describe(error)
    if status >= 500 or error.upstream_status:
        logger.warning(
            "check_error",
            kind=error.kind.value,
            upstream_status=error.upstream_status,
            endpoint=error.endpoint,
            detail=error.message,
        )
    return JSONResponse(status_code=status, content=error_body(error.kind.value, message, status))


def bad_request_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content=error_body("bad_request", message, 400))


# =============================================
# DEPENDENCIES
# =============================================

def get_checker(request: Request) -> ProfileChecker:
    return request.app.state.checker


# =============================================
# ROUTES
# =============================================

router = APIRouter(prefix="/api", tags=["check"])


@router.post("/check")
async def check_profile(body: CheckRequest, checker: ProfileChecker = Depends(get_checker)):
    """
    Score a Steam profile.

    Success carries the full score payload plus "cache": "hit"|"miss".
    Failures carry {"error", "message", "status"} with the matching HTTP code;
    a partially populated success is never returned.
    """
    try:
        return await checker.check(
            body.input,
            title_appid=body.selected_title_id,
            title_name=body.selected_title_name,
        )
    except CheckError as e:
        return check_error_response(e)
    except Exception as e:
        logger.error("check_failed", error=str(e), type=type(e).__name__)
        return bad_request_response(str(e) or "Unknown error")


@router.get("/titles")
async def list_titles():
    return {"titles": FEATURED_TITLES}
