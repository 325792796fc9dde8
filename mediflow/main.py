"""
Mediflow Shift Handover - FastAPI Application

API endpoints for:
- AI handover summary generation for the current nurse's shift
- Saving, listing and deleting handovers
- Free-form questions to the Gemini gateway

Caller identity arrives in the ``X-User-Id`` header set by the upstream
authentication gateway.
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional, Tuple

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from mediflow.config import NowFn, Settings
from mediflow.core.llm import GeminiClient, GeminiConfig
from mediflow.models.api import (
    AiAnswerResponse,
    AiQuestionRequest,
    ApiResponse,
    HandoverCreateRequest,
    HandoverResponse,
    HealthResponse,
)
from mediflow.services import HandoverService, SummarizationGateway
from mediflow.store import (
    ClinicalDataStore,
    HandoverRepository,
    InMemoryClinicalStore,
    InMemoryHandoverRepository,
)
from mediflow.utils import (
    AuthenticationError,
    HandoverError,
    SummarizationError,
    ValidationError,
    get_logger,
    setup_logging,
)

logger = get_logger(__name__)

VERSION = "1.0.0"
GENERIC_ERROR_MESSAGE = "An internal error occurred"


# ---- Dependencies ----

def get_service(request: Request) -> HandoverService:
    return request.app.state.handover_service


def current_user_id(x_user_id: Optional[int] = Header(default=None, alias="X-User-Id")) -> int:
    if x_user_id is None:
        raise AuthenticationError()
    return x_user_id


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ApiResponse.error(message).model_dump())


def _first_error(errors) -> Tuple[str, str]:
    """Field name and message of the first pydantic error."""
    if not errors:
        return "request", "validation error"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "header")]
    return ".".join(loc) or "request", first.get("msg", "invalid value")


def _validation_message(errors) -> str:
    field, message = _first_error(errors)
    return f"{field}: {message}"


# ---- Exception handlers ----

async def handle_handover_error(request: Request, exc: HandoverError) -> JSONResponse:
    if isinstance(exc, SummarizationError):
        logger.error(f"{request.method} {request.url.path}: summarization failed: {exc.to_dict()}")
        return _error_response(exc.status_code, SummarizationError.public_message)

    logger.warning(f"{request.method} {request.url.path}: {exc.code.value} {exc.details}")
    message = str(exc) if isinstance(exc, ValidationError) else exc.message
    return _error_response(exc.status_code, message)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _validation_message(exc.errors())
    logger.warning(f"{request.method} {request.url.path}: invalid request ({message})")
    return _error_response(400, message)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path}: unhandled error", exc_info=exc)
    return _error_response(500, GENERIC_ERROR_MESSAGE)


# ---- Application factory ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Handover API ready to accept requests")
    yield
    logger.info("Handover API shut down.")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ClinicalDataStore] = None,
    repository: Optional[HandoverRepository] = None,
    gateway: Optional[SummarizationGateway] = None,
    now_fn: Optional[NowFn] = None,
) -> FastAPI:
    """
    Build the application.

    Missing collaborators default to in-memory stores and a Gemini client
    configured from the environment.
    """
    settings = settings or Settings()
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(
        title="Mediflow Shift Handover API",
        description="Shift handover aggregation and Gemini summarization",
        version=VERSION,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.store = store if store is not None else InMemoryClinicalStore()
    app.state.repository = repository if repository is not None else InMemoryHandoverRepository()
    app.state.gateway = gateway if gateway is not None else GeminiClient(GeminiConfig())
    app.state.handover_service = HandoverService(
        store=app.state.store,
        repository=app.state.repository,
        gateway=app.state.gateway,
        tz=settings.tzinfo,
        now_fn=now_fn or settings.now_fn(),
        max_summary_chars=settings.max_summary_chars,
    )
    app.state.started_at = datetime.now(settings.tzinfo)

    app.add_exception_handler(HandoverError, handle_handover_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)

    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint."""
        now = datetime.now(request.app.state.settings.tzinfo)
        return HealthResponse(
            status="healthy",
            version=VERSION,
            timestamp=now.isoformat(),
            uptime_seconds=(now - request.app.state.started_at).total_seconds(),
        )

    @app.post("/api/handovers/ai-summary", tags=["Handover"])
    async def generate_ai_summary(
        from_shift_id: int = Query(..., alias="fromShiftId"),
        department_id: Optional[int] = Query(default=None, alias="departmentId"),
        user_id: int = Depends(current_user_id),
        service: HandoverService = Depends(get_service),
    ):
        """Generate the handover narrative for the caller's patients on today's shift."""
        summary = await service.generate_ai_summary(user_id, from_shift_id, department_id)
        return ApiResponse.ok(summary, "AI summary generated")

    @app.post("/api/handovers", tags=["Handover"])
    async def save_handover(
        request: Request,
        department_id: int = Query(..., alias="departmentId"),
        from_shift_id: int = Query(..., alias="fromShiftId"),
        to_shift_id: int = Query(..., alias="toShiftId"),
        user_id: int = Depends(current_user_id),
        service: HandoverService = Depends(get_service),
    ):
        """
        Save a handover.

        The body is either the summary as ``text/plain`` or JSON with
        ``aiSummary`` and optional ``additionalNotes``.
        """
        content_type = request.headers.get("content-type", "")
        raw = await request.body()
        if content_type.startswith("application/json"):
            try:
                body = HandoverCreateRequest.model_validate_json(raw)
            except PydanticValidationError as e:
                field, message = _first_error(e.errors())
                raise ValidationError(message, field=field) from e
            ai_summary, additional_notes = body.ai_summary, body.additional_notes
        else:
            try:
                ai_summary, additional_notes = raw.decode("utf-8"), None
            except UnicodeDecodeError as e:
                raise ValidationError("must be UTF-8 text", field="aiSummary") from e

        handover = service.save_handover(
            department_id, from_shift_id, to_shift_id, ai_summary, user_id, additional_notes
        )
        data = HandoverResponse.from_handover(handover).model_dump(by_alias=True, mode="json")
        return ApiResponse.ok(data, "Handover saved")

    @app.get("/api/handovers/department/{department_id}", tags=["Handover"])
    def list_handovers(
        department_id: int,
        service: HandoverService = Depends(get_service),
    ):
        """Handovers of a department, newest first."""
        handovers = service.list_handovers_by_department(department_id)
        data = [
            HandoverResponse.from_handover(h).model_dump(by_alias=True, mode="json")
            for h in handovers
        ]
        return ApiResponse.ok(data)

    @app.delete("/api/handovers/{handover_id}", tags=["Handover"])
    def delete_handover(
        handover_id: int,
        user_id: int = Depends(current_user_id),
        service: HandoverService = Depends(get_service),
    ):
        """Delete a handover (author only)."""
        service.delete_handover(handover_id, user_id)
        return ApiResponse.ok(None, "Handover deleted")

    @app.post("/api/ai/ask", tags=["AI"])
    async def ask_question(body: AiQuestionRequest, request: Request):
        """Send a free-form question to the Gemini gateway."""
        logger.info(f"AI question received ({len(body.question)} chars)")
        answer = await request.app.state.gateway.generate_text(body.question)
        data = AiAnswerResponse(question=body.question, answer=answer).model_dump()
        return ApiResponse.ok(data, "AI answer generated")


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("mediflow.main:app", host="0.0.0.0", port=8000)
