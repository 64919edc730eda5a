# apps/backend/main.py
import logging
import os
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from apps.backend.routes.commission import router as commission_router
from apps.backend.routes.financial import router as financial_router
from apps.backend.routes.gamification import router as gamification_router
from apps.backend.routes.health import router as health_router
from apps.backend.services import settings
from apps.backend.services.admin.logger import log_request_response

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("revenda.main")

app = FastAPI(
    title="Revenda Platform",
    version=settings.APP_VERSION,
    description="Reseller commission tiers, gamification and balances",
)

# -------------------------------------------------------------------
# CORS (storefront + admin panel)
# -------------------------------------------------------------------
if settings.CORS_ALLOW_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
    )

# -------------------------------------------------------------------
# Request logging (sensitive headers masked)
# -------------------------------------------------------------------
@app.middleware("http")
async def request_logging(request: Request, call_next):
    start = time.monotonic()
    response = await call_next(request)
    if settings.SETTINGS["request_logging"]:
        log_request_response(request, response, start)
    return response

# -------------------------------------------------------------------
# Routers
# -------------------------------------------------------------------
app.include_router(health_router)
app.include_router(commission_router)
app.include_router(gamification_router)
app.include_router(financial_router)

# -------------------------------------------------------------------
# Root
# -------------------------------------------------------------------
@app.get("/")
async def root():
    return {
        "status": "Revenda Online",
        "version": settings.APP_VERSION,
        "routes": [
            "/health",
            "/commission",
            "/gamification",
            "/financial",
        ],
    }

@app.on_event("startup")
async def startup_event():
    log.info(
        "Revenda starting (supabase=%s, timezone=%s)",
        bool(settings.SUPABASE_URL),
        settings.BUSINESS_TIMEZONE,
    )
