from fastapi import APIRouter, Depends

from transcripts_machine.components.summarizer.summarizer import summarize
from transcripts_machine.config import AutomationSettings, get_automation_settings
from transcripts_machine.core.errors import ValidationError
from transcripts_machine_api.schemas.v1.requests import SummaryRequest
from transcripts_machine_api.schemas.v1.responses import ErrorResponse, SummaryResponse

router = APIRouter(tags=["summaries"])


@router.post(
    "/summaries",
    response_model=SummaryResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Empty transcript"},
        502: {"model": ErrorResponse, "description": "Summary generation failed"},
    },
)
async def summarize_endpoint(
    request: SummaryRequest,
    settings: AutomationSettings = Depends(get_automation_settings),
) -> SummaryResponse:
    """Generate a concise summary of an ordered transcript."""
    if not request.transcript:
        raise ValidationError("Transcript is empty, nothing to summarize")
    summary = await summarize(request.transcript, timeout=settings.summary_timeout)
    return SummaryResponse(summary=summary)
