from fastapi import APIRouter

from transcripts_machine_api.api.v1.endpoints import health, sessions, summaries, transcripts

api_router = APIRouter()

api_router.include_router(health.router, prefix="", tags=["health"])
api_router.include_router(sessions.router, prefix="", tags=["sessions"])
api_router.include_router(transcripts.router, prefix="", tags=["transcripts"])
api_router.include_router(summaries.router, prefix="", tags=["summaries"])
