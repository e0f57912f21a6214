"""
Health endpoint
===============

GET /test -- liveness probe
"""

from fastapi import APIRouter

from src.api.schemas import MessageResponse

router = APIRouter(tags=["health"])


@router.get("/test", response_model=MessageResponse, summary="Health check")
async def health():
    return MessageResponse(message="API is working")
