"""Symptom analysis function endpoint.

A thin HTTP wrapper around SymptomAnalysisService. Unlike the REST routes,
errors are returned as ``{"error": message}`` bodies with the upstream
status (429, 402), 422 for an invalid request body, or 500, so clients
can show the message directly.
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from app.auth import verify_bearer_token
from app.config import settings
from app.schemas.analysis import AnalyzeRequest, ErrorResponse, RiskAnalysis
from app.services.analysis import AnalysisError, SymptomAnalysisService

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    """First validation error as "field: message"."""
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"] if part != "body")
    return f"{field}: {error['msg']}" if field else error["msg"]


class FunctionRoute(APIRoute):
    """Route that reports request validation errors as ``{"error": message}``."""

    def get_route_handler(self):
        handler = super().get_route_handler()

        async def route_handler(request: Request) -> Response:
            try:
                return await handler(request)
            except RequestValidationError as e:
                logger.info("Rejected %s request: %s", request.url.path, e.errors())
                return JSONResponse(
                    status_code=422,
                    content={"error": _validation_message(e)},
                )

        return route_handler


router = APIRouter(prefix="/functions", tags=["analysis"], route_class=FunctionRoute)

FALLBACK_HEADER = "X-Analysis-Fallback"


async def get_analysis_service() -> AsyncGenerator[SymptomAnalysisService, None]:
    """Provide an analysis service configured from settings."""
    service = SymptomAnalysisService.from_settings(settings)
    try:
        yield service
    finally:
        await service.close()


@router.options("/analyze-symptoms", include_in_schema=False)
async def analyze_symptoms_preflight() -> Response:
    """Answer CORS pre-flight requests with an empty 200."""
    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/analyze-symptoms",
    response_model=RiskAnalysis,
    responses={
        402: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def analyze_symptoms(
    request: AnalyzeRequest,
    response: Response,
    analyzer: SymptomAnalysisService = Depends(get_analysis_service),
    _user_id: str = Depends(verify_bearer_token),
):
    """Return an educational risk assessment for a list of symptoms.

    When the model reply cannot be parsed a generic fallback assessment is
    returned with status 200 and the ``X-Analysis-Fallback: true`` header.

    Returns:
        RiskAnalysis, or an error body with status 429, 402, or 500.
    """
    try:
        outcome = await analyzer.analyze(request.symptoms)
    except AnalysisError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
    except Exception as e:
        logger.exception("Error in analyze-symptoms")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(e) or "Unknown error occurred"},
        )

    if outcome.used_fallback:
        response.headers[FALLBACK_HEADER] = "true"
    return outcome.analysis
