from contextlib import asynccontextmanager, contextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from bos.api.errors import error_response
from bos.api.routes import router as api_router
from bos.core.config import get_settings
from bos.core.database import SessionLocal, get_db
from bos.events import InternalEvent, event_bus
from bos.logging import configure_logging
from bos.middleware.request_context import RequestContextMiddleware
from bos.middleware.request_logging import RequestLoggingMiddleware
from bos.otel import get_fastapi_server_request_hook, setup_otel
from bos.platform.numbering import MissingOptionError
from bos.platform.options.service import option_service


configure_logging()
logger = logging.getLogger("bos.lifecycle")


def _on_system_started(event: InternalEvent) -> None:
    logger.info("system_event", extra={"event_name": event.name, "event_payload": event.payload})


@contextmanager
def _session_scope():
    override = app.dependency_overrides.get(get_db) if "app" in globals() else None
    if override is None:
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()
        return

    generator = override()
    session = next(generator)
    try:
        yield session
    finally:
        try:
            next(generator)
        except StopIteration:
            pass


def _seed_options() -> None:
    try:
        with _session_scope() as session:
            option_service.seed_default_options(session)
    except Exception as exc:
        logger.critical("options_seed_failed", exc_info=True, extra={"error": str(exc)[:500]})
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    event_bus.subscribe("system.started", _on_system_started)
    if get_settings().seed_options_on_startup:
        _seed_options()
    event_bus.publish("system.started", {"service": "api"})
    yield


app = FastAPI(title="BOS API", version="0.1.0", lifespan=lifespan)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestContextMiddleware)
app.include_router(api_router)


@app.exception_handler(MissingOptionError)
async def missing_option_handler(request: Request, exc: MissingOptionError) -> JSONResponse:
    logger.error("configuration_missing", extra={"option_key": str(exc.key), "error": str(exc)[:500]})
    return error_response(
        request,
        status_code=500,
        code="configuration_missing",
        message="required option is missing or malformed",
        details={"key": str(exc.key)},
    )


settings = get_settings()
setup_otel(settings)

if not getattr(app, "_is_instrumented_by_opentelemetry", False):
    FastAPIInstrumentor().instrument_app(app, server_request_hook=get_fastapi_server_request_hook())
