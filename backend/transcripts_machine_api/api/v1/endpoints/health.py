import os

from fastapi import APIRouter, Depends

from transcripts_machine.config import AutomationSettings, get_automation_settings
from transcripts_machine_api.core.config import Settings, get_settings
from transcripts_machine_api.schemas.v1.responses import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_settings),
    automation: AutomationSettings = Depends(get_automation_settings),
) -> HealthResponse:
    """Liveness plus a report of which upstream credentials are configured."""
    return HealthResponse(
        status="healthy",
        version=settings.version,
        browserbase_configured=bool(
            automation.browserbase_api_key and automation.browserbase_project_id
        ),
        models_configured=bool(os.getenv("OPENAI_API_KEY") and os.getenv("GOOGLE_API_KEY")),
    )
