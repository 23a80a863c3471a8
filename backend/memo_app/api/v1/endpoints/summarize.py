from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from memo_app.api.v1.schemas.summary import (  # noqa: TCH001
    ErrorResponse,
    SummarizeRequest,
    SummarizeResponse,
)
from memo_app.core.errors import ConfigurationError, SummarizationError, ValidationError
from memo_app.dependencies import get_summary_service
from memo_app.utils.logging import get_logger

if TYPE_CHECKING:
    from memo_app.core.services.summary_service import SummaryService

logger = get_logger(__name__)

router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "Memo content is empty"},
        500: {"model": ErrorResponse, "description": "Missing API key or summary generation failed"},
    }
)


@router.post("/summarize", response_model=SummarizeResponse)
async def summarize_memo(
    payload: SummarizeRequest,
    service: SummaryService = Depends(get_summary_service),
):
    """Generate a 3-5 sentence summary of a memo."""
    try:
        summary = await service.summarize(payload.title, payload.content)
    except ValidationError as err:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": err.message},
        )
    except (ConfigurationError, SummarizationError) as err:
        logger.error("Summary failed", extra={"error_type": type(err).__name__, "error": err.message})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": err.message},
        )
    return SummarizeResponse(summary=summary)
