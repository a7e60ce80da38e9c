from fastapi import APIRouter

from garuda.api.v1.chat import router as chat_router
from garuda.api.v1.quotes import router as quotes_router
from garuda.core.config import settings

# ==================================================
# API Router Aggregator
# ==================================================
api_router = APIRouter()

# e.g. /api/v1/chat
api_router.include_router(chat_router, tags=["chat"])

# e.g. /api/v1/quote/daily
api_router.include_router(quotes_router, prefix="/quote", tags=["quote"])


@api_router.get("/health")
async def health_check():
    """
    Simple liveness probe for load balancers.
    """
    return {"status": "healthy", "version": settings.VERSION}
