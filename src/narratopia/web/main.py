# src/narratopia/web/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.requests import Request

from narratopia import __version__
from narratopia.canon.db import ensure_schema
from narratopia.config import config
from narratopia.core.exceptions import NarratopiaError
from narratopia.core.logging import get_logger, init_logging
from narratopia.models import ErrorResponse
from narratopia.web.routes import router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_logging()
    if config.database.auto_migrate:
        await ensure_schema()
    yield


# Create the FastAPI application
app = FastAPI(
    title="Narratopia Manuscript API",
    description="Chapters, versions and the codex relationship graph",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(router)


def _error_response(
    status_code: int, kind: str, message: str, details: dict | None = None
) -> JSONResponse:
    if config.system.is_production:
        details = None
    body = ErrorResponse(kind=kind, message=message, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(NarratopiaError)
async def handle_domain_error(request: Request, exc: NarratopiaError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Request failed: %s",
            exc.message,
            extra={"path": request.url.path, "kind": exc.kind},
        )
    return _error_response(exc.status_code, exc.kind, exc.message, exc.details or None)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    first = errors[0]["msg"] if errors else "Invalid request"
    message = first.removeprefix("Value error, ")
    return _error_response(400, "bad_request", message, {"errors": errors})


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return _error_response(500, "internal", "Server error", {"error": str(exc)})


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


def run() -> None:
    """Serve the API with uvicorn on the configured port."""
    import uvicorn

    init_logging()
    uvicorn.run(app, host="0.0.0.0", port=config.system.port, log_config=None)


if __name__ == "__main__":  # pragma: no cover - CLI execution
    run()
