"""Current user's profile and recent API usage."""

from typing import Optional

from fastapi import APIRouter, Depends

from analytics.windows import parse_days
from cli.config_models import MindJournalConfig
from web.auth import get_current_user
from web.deps import get_config
from web.models import UserMe
from web.user_store import get_event_counts, get_user

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/me", response_model=UserMe)
async def get_me(
    days: Optional[str] = None,
    user: dict = Depends(get_current_user),
    config: MindJournalConfig = Depends(get_config),
):
    """Profile as stored on the last authenticated request, plus event counts."""
    n = parse_days(
        days, default=config.analytics.default_days, max_days=config.analytics.max_days
    )
    record = get_user(user["id"]) or {}
    return UserMe(
        id=user["id"],
        email=record.get("email", user.get("email")),
        name=record.get("name", user.get("name")),
        created_at=record.get("created_at"),
        last_seen_at=record.get("last_seen_at"),
        usage=get_event_counts(user["id"], days=n),
    )
