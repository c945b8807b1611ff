"""PR Assistant - FastAPI entry point."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pr_assistant.config import settings
from pr_assistant.core.exceptions import ApiException
from pr_assistant.core.logging import get_logger
from pr_assistant.core.schemas.responses import ErrorResponse, HealthResponse
from pr_assistant.services.assistant.activities import AssistantActivities
from pr_assistant.services.assistant.routes import router as assistant_router
from pr_assistant.services.assistant.runtime import AssistantRuntime
from pr_assistant.services.assistant.store import SqliteStateStore
from pr_assistant.services.github.routes import router as github_router

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    runtime = AssistantRuntime(
        activities=AssistantActivities(),
        store=SqliteStateStore(Path(settings.state_db_path)),
    )
    await runtime.restore()
    app.state.runtime = runtime
    try:
        yield
    finally:
        await runtime.shutdown()


app = FastAPI(
    title="PR Assistant",
    description="Pull request assistant: diff summaries, purpose, deployment and code review",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(ApiException)
async def api_exception_handler(request: Request, exc: ApiException) -> JSONResponse:
    """Handle custom API exceptions and return structured error response."""
    logger.warning(f"API error: {exc.message} (status={exc.status_code})")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.message,
            details=exc.details if exc.details else None,
        ).model_dump(),
    )

# Include routes
app.include_router(github_router, prefix="/api")
app.include_router(assistant_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "pr-assistant",
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting PR Assistant on {settings.host}:{settings.port}")
    uvicorn.run(
        "pr_assistant.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
