import time
import uuid

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from vadmine.core.clock import SystemClock
from vadmine.core.config import get_settings
from vadmine.core.exceptions import (
    AppError,
    app_exception_handler,
    generic_exception_handler,
    validation_exception_handler,
)
from vadmine.core.logging import bind_request_id, configure_logging, get_logger
from vadmine.routers import auth, boost, daily, ledger, mining, referrals, watch_earn
from vadmine.storage.base import build_ledger_store

settings = get_settings()
configure_logging(debug=settings.debug)
log = get_logger(__name__)

app = FastAPI(
    title="VAD Mining Rewards API",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    bind_request_id(request_id)
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    log.info(
        "request",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(duration_ms, 2),
    )
    response.headers["X-Request-ID"] = request_id
    return response


app.add_exception_handler(AppError, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Routers
app.include_router(auth.router, prefix="/v1/auth", tags=["auth"])
app.include_router(ledger.router, prefix="/v1/ledger", tags=["ledger"])
app.include_router(mining.router, prefix="/v1/mining", tags=["mining"])
app.include_router(boost.router, prefix="/v1/boost", tags=["boost"])
app.include_router(daily.router, prefix="/v1/daily", tags=["daily"])
app.include_router(watch_earn.router, prefix="/v1/watch-earn", tags=["watch-earn"])
app.include_router(referrals.router, prefix="/v1/referrals", tags=["referrals"])


@app.on_event("startup")
async def startup():
    if settings.sentry_dsn:
        import sentry_sdk
        sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.env, traces_sample_rate=0.1)
        log.info("startup", msg="Sentry enabled")
    if settings.ledger_backend == "mongo":
        from vadmine.db.init import init_db
        await init_db()
        log.info("startup", msg="DB connected")
    app.state.ledger_store = build_ledger_store()
    app.state.clock = SystemClock()
    log.info("startup", ledger_backend=settings.ledger_backend)


@app.get("/health")
async def health():
    """Health check for load balancers and monitoring."""
    return {"status": "ok"}
