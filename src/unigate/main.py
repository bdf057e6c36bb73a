import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from unigate.config import Settings
from unigate.dbutils.dbmanager import DBManager
from unigate.discovery import populate_registry
from unigate.dispatch import (
    DispatchCore,
    DispatchResult,
    OLLAMA_CHAT,
    OLLAMA_GENERATE,
    OPENAI_CHAT,
    Route,
)
from unigate.errors import ClientError, GatewayError, InternalFault, RegistryError
from unigate.logging_config import generate_request_id, set_request_id, setup_logging
from unigate.providers.pool import AdapterPool
from unigate.registry import ModelRegistry
from unigate.responses import to_model_info, to_model_list, to_tag_list
from unigate.schemas import ShowRequest

logger = logging.getLogger(__name__)

# Global Components
_registry: Optional[ModelRegistry] = None
_adapters: Optional[AdapterPool] = None
_dispatch: Optional[DispatchCore] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application startup/shutdown lifecycle.
    Prepares the database, populates the model registry and builds the dispatch core.
    """
    global _registry, _adapters, _dispatch

    settings = Settings.get_settings()
    setup_logging(settings.log_level)

    DBManager.configure(settings.database_url)
    with DBManager() as db:
        if settings.reset_database_on_start:
            db.reset()
        else:
            db.create_all()

    _registry = ModelRegistry()
    _adapters = AdapterPool()
    await populate_registry(settings, _registry, _adapters)
    _dispatch = DispatchCore(_registry, _adapters)
    logger.info("Gateway ready with %d provider(s)", len(_adapters))

    yield

    await _adapters.close()


app = FastAPI(title="unigate", docs_url="/docs", openapi_url="/openapi.json", lifespan=lifespan)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    if exc.status_code >= 500:
        logger.error("Request failed | path=%s | status=%d | error=%s", request.url.path, exc.status_code, exc.message)
    return JSONResponse(content=exc.to_dict(), status_code=exc.status_code)


# Paths to exclude from request logging (health checks are too noisy)
EXCLUDED_LOG_PATHS = {"/health", "/health/"}


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """
    Logs every request with a correlation ID and keeps a failing request from
    taking the server down: unexpected exceptions become a 500 reply.
    """
    set_request_id(generate_request_id())

    path = request.url.path
    should_log = path not in EXCLUDED_LOG_PATHS
    start_time = time.perf_counter()

    if should_log:
        logger.debug("Request started | method=%s path=%s", request.method, path)

    try:
        response = await call_next(request)
    except Exception:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.exception(
            "Request failed | method=%s path=%s | duration=%dms", request.method, path, duration_ms
        )
        return JSONResponse(content={"error": "Internal server error"}, status_code=500)

    duration_ms = (time.perf_counter() - start_time) * 1000
    if should_log:
        logger.info(
            "Request completed | method=%s path=%s status=%d | duration=%dms",
            request.method,
            path,
            response.status_code,
            duration_ms,
        )
    return response


def _require_ready():
    if _registry is None or _dispatch is None:
        raise InternalFault("Gateway is not initialized")


def _to_response(result: DispatchResult) -> Response:
    if result.stream is not None:
        return StreamingResponse(result.stream, status_code=result.status_code, media_type=result.media_type)
    return Response(content=result.content, status_code=result.status_code, media_type=result.media_type)


async def _dispatch_route(route: Route, request: Request) -> Response:
    _require_ready()
    # read once; every later step works on this buffer
    raw_body = await request.body()
    result = await _dispatch.dispatch(route, raw_body, dict(request.headers), method=request.method)
    return _to_response(result)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/v1/models")
async def list_models():
    """OpenAI-style model listing of every active model in the registry."""
    _require_ready()
    try:
        entries = _registry.list_models()
    except RegistryError as e:
        raise InternalFault("Failed to retrieve providers") from e
    return JSONResponse(content=to_model_list(entries))


@app.get("/api/tags")
async def list_tags():
    """Ollama-style tag listing of every active model in the registry."""
    _require_ready()
    try:
        entries = _registry.list_models()
    except RegistryError as e:
        raise InternalFault("Failed to retrieve providers") from e
    return JSONResponse(content=to_tag_list(entries))


@app.post("/api/show")
async def show_model(request: Request):
    _require_ready()
    raw_body = await request.body()
    try:
        data = ShowRequest.model_validate_json(raw_body)
    except ValueError as e:
        raise ClientError("Invalid request body") from e
    if not data.model:
        raise ClientError("Model name is required")

    try:
        match = _registry.find_model(data.model)
    except RegistryError as e:
        raise InternalFault("Failed to retrieve providers") from e
    if match is None:
        raise ClientError("Model not found", status_code=404)
    provider, _ = match
    return JSONResponse(content=to_model_info(provider))


@app.post("/api/v1/chat/completions")
async def chat_completions(request: Request):
    """
    OpenAI-compatible chat endpoint. Models of passthrough providers are relayed to
    the provider's own ``/v1/chat/completions``; all others are translated.
    """
    return await _dispatch_route(OPENAI_CHAT, request)


@app.post("/api/chat")
async def ollama_chat(request: Request):
    return await _dispatch_route(OLLAMA_CHAT, request)


@app.post("/api/generate")
async def ollama_generate(request: Request):
    return await _dispatch_route(OLLAMA_GENERATE, request)
