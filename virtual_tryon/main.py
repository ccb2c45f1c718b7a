import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from virtual_tryon.config import Settings, get_settings
from virtual_tryon.errors import ErrorKind, TryOnError
from virtual_tryon.models import GARMENT_CATEGORIES, HealthResponse, TryOnRequest
from virtual_tryon.tryon import MISSING_PHOTOS_MESSAGE, TryOnOrchestrator

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": (
        "authorization, x-client-info, apikey, content-type, "
        "x-supabase-client-platform, x-supabase-client-platform-version, "
        "x-supabase-client-runtime, x-supabase-client-runtime-version"
    ),
}


async def _parse_request(request: Request) -> TryOnRequest:
    try:
        body = await request.json()
    except ValueError:
        raise TryOnError(ErrorKind.VALIDATION, "Request body must be a JSON object")
    if not isinstance(body, dict):
        raise TryOnError(ErrorKind.VALIDATION, "Request body must be a JSON object")

    # Missing photos win over every other field problem
    if not body.get("userPhoto") or not body.get("clothingPhoto"):
        logger.error("Missing required images")
        raise TryOnError(ErrorKind.VALIDATION, MISSING_PHOTOS_MESSAGE)

    try:
        return TryOnRequest.model_validate(body)
    except ValidationError as e:
        if any(err["loc"][:1] == ("category",) for err in e.errors()):
            raise TryOnError(
                ErrorKind.VALIDATION,
                f"category must be one of: {', '.join(GARMENT_CATEGORIES)}",
            ) from e
        raise TryOnError(ErrorKind.VALIDATION, "Invalid request body") from e


async def _tryon_error_handler(request: Request, exc: TryOnError) -> JSONResponse:
    return JSONResponse(content=exc.to_body(), status_code=exc.status_code)


def create_app(
    settings: Settings | None = None,
    orchestrator: TryOnOrchestrator | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    orchestrator = orchestrator or TryOnOrchestrator(settings)

    logging.basicConfig(level=settings.log_level)
    if not settings.replicate_configured:
        logger.warning("REPLICATE_API_TOKEN is not set; try-on requests will fail")

    app = FastAPI(title="Virtual Try-On")
    app.state.settings = settings
    app.state.orchestrator = orchestrator
    app.add_exception_handler(TryOnError, _tryon_error_handler)

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", replicate_configured=settings.replicate_configured)

    @app.options("/virtual-tryon")
    async def virtual_tryon_preflight() -> PlainTextResponse:
        return PlainTextResponse("ok")

    @app.post("/virtual-tryon")
    async def virtual_tryon(request: Request) -> JSONResponse:
        tryon_request = await _parse_request(request)
        try:
            result = await orchestrator.run(tryon_request)
        except TryOnError:
            raise
        except Exception as e:
            logger.exception("Virtual try-on error")
            return JSONResponse(
                content={"error": str(e) or "An unexpected error occurred"}, status_code=500
            )
        return JSONResponse(content=result.model_dump(exclude_none=True))

    return app


app = create_app()
