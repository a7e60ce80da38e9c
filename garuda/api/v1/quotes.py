from datetime import date
from typing import Optional

from fastapi import APIRouter

from garuda.schemas.chat import DailyQuote
from garuda.services.quotes import daily_quote

router = APIRouter()


@router.get("/daily", response_model=DailyQuote)
async def get_daily_quote(day: Optional[date] = None):
    """The verse of the day (or of `day`, as YYYY-MM-DD)."""
    return daily_quote(day)
