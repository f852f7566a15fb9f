"""HTTP surface: POST /search, POST /search/feedback, GET /search/health."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from resume_search.config import get_http_host, get_http_port
from resume_search.errors import InvalidRequest
from resume_search.models.search import FeedbackRequest, SearchRequest, SearchResponse
from resume_search.runtime import SearchRuntime, configure_logging, create_runtime

logger = logging.getLogger(__name__)

RuntimeFactory = Callable[[], Awaitable[SearchRuntime]]

router = APIRouter(prefix="/search")


def get_runtime(request: Request) -> SearchRuntime:
    """The runtime opened by the application lifespan."""
    runtime: SearchRuntime = request.app.state.runtime
    return runtime


UserId = Annotated[str, Header(alias="X-User-Id")]
Runtime = Annotated[SearchRuntime, Depends(get_runtime)]


@router.post("", response_model=SearchResponse)
async def search(body: SearchRequest, runtime: Runtime, user_id: UserId = "anonymous"):
    """Run an adaptive semantic search, recording any attached feedback first."""
    return await runtime.orchestrator.search(body.query, user_id, feedback=body.feedback)


@router.post("/feedback")
async def feedback(body: FeedbackRequest, runtime: Runtime, user_id: UserId = "anonymous"):
    """Record a rating for a result."""
    entry = runtime.orchestrator.record_feedback(
        user_id, body.query, body.result_id, body.rating, body.interaction
    )
    return {
        "message": "Feedback recorded",
        "feedback": {
            "query": entry.query,
            "resultId": entry.result_id,
            "rating": entry.rating,
            "interaction": entry.interaction.value,
        },
    }


@router.get("/health")
async def health(runtime: Runtime):
    """Generation provider availability."""
    try:
        return await runtime.orchestrator.health()
    except Exception as e:
        logger.exception("Health check failed")
        return JSONResponse(status_code=500, content={"status": "error", "message": str(e)})


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {error.get('msg')}" if loc else str(error.get("msg")))
    return "Invalid request: " + "; ".join(parts)


async def _invalid_request_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": str(exc)})


async def _validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": _validation_message(exc)})


async def _server_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"message": "Error processing search query", "error": str(exc)},
    )


def create_app(runtime_factory: RuntimeFactory = create_runtime) -> FastAPI:
    """Build the FastAPI application around a runtime factory."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        runtime = await runtime_factory()
        app.state.runtime = runtime
        logger.info("Search API started")
        try:
            yield
        finally:
            await runtime.close()
            logger.info("Search API stopped")

    app = FastAPI(title="Resume Search", lifespan=lifespan)
    app.add_exception_handler(InvalidRequest, _invalid_request_handler)
    app.add_exception_handler(RequestValidationError, _validation_handler)
    app.add_exception_handler(Exception, _server_error_handler)
    app.include_router(router)
    return app


def main() -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    configure_logging()
    uvicorn.run(create_app(), host=get_http_host(), port=get_http_port())
