import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

import config
from routes.charts import router as charts_router
from routes.profile import router as profile_router
from routes.trade_insights import router as trade_insights_router
from utils.errors import ApiError, BadRequest, InternalError, api_error_handler
from utils.logger import setup_logging
from utils.supabase_client import SupabaseConfigurationError
from version import __version__

setup_logging()
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app bootstrap
# ---------------------------------------------------------------------------

app = FastAPI(title=config.SERVICE_NAME, version=__version__)
app.include_router(charts_router)
app.include_router(profile_router)
app.include_router(trade_insights_router)

# CORS settings
_allowed_origins = getattr(config, "ALLOWED_ORIGINS", [])
app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins if _allowed_origins else ["*"],
    allow_credentials=bool(_allowed_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------

app.add_exception_handler(ApiError, api_error_handler)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # e.g. a multipart "file" sent as a plain text field
    fields = sorted({".".join(str(p) for p in err["loc"][1:]) for err in exc.errors()})
    return await api_error_handler(
        request, BadRequest("Invalid request fields", details=", ".join(fields))
    )


@app.exception_handler(SupabaseConfigurationError)
async def supabase_configuration_error_handler(
    request: Request, exc: SupabaseConfigurationError
) -> JSONResponse:
    logger.error("Supabase not configured: %s", exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return await api_error_handler(request, InternalError(cause=exc))


# ---------------------------------------------------------------------------
# Status endpoints
# ---------------------------------------------------------------------------

startup_time = time.time()


class HealthStatus(BaseModel):
    service: str
    version: str
    uptime_seconds: int
    timestamp: str


@app.get("/api/health", response_model=HealthStatus, include_in_schema=False)
async def health_check() -> HealthStatus:
    return HealthStatus(
        service=config.SERVICE_NAME,
        version=__version__,
        uptime_seconds=int(time.time() - startup_time),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
