# backend/pkasla/main.py
from contextlib import asynccontextmanager
import logging
from pathlib import Path
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from .core.config import settings
from .database import init_db
from .errors import register_error_handlers
from .middleware.maintenance import MaintenanceModeMiddleware
from .middleware.prometheus_middleware import PrometheusMiddleware
from .middleware.rate_limiter import RateLimitMiddleware
from .routes import prometheus
from .routes.v1 import (
    admin as admin_v1,
    applications as applications_v1,
    audit_logs as audit_logs_v1,
    auth as auth_v1,
    blogs as blogs_v1,
    events as events_v1,
    gifts as gifts_v1,
    guests as guests_v1,
    health as health_v1,
    jobs as jobs_v1,
    payment_logs as payment_logs_v1,
    payments as payments_v1,
    subscription_plans as subscription_plans_v1,
    subscriptions as subscriptions_v1,
    template_purchases as template_purchases_v1,
    templates as templates_v1,
    upload as upload_v1,
    users as users_v1,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

API_TITLE = "PKASLA API"
API_VERSION = "1.0.0"


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(f"Starting {API_TITLE} ({settings.environment})")
    Path(settings.storage_local_path).mkdir(parents=True, exist_ok=True)
    init_db()
    yield
    logger.info(f"Shutting down {API_TITLE}")


app = FastAPI(
    title=API_TITLE,
    version=API_VERSION,
    description="Wedding invitation and job board backend",
    lifespan=app_lifespan,
)

register_error_handlers(app)

# Last added runs first
app.add_middleware(MaintenanceModeMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(PrometheusMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret.get_secret_value(),
    session_cookie=settings.session_cookie_name,
    max_age=settings.session_max_age,
    same_site="lax",
    https_only=settings.is_production,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
)

# V1 API - prefixes are added here, not in the route modules
api_v1 = APIRouter(prefix="/api/v1")

api_v1.include_router(health_v1.router)
api_v1.include_router(auth_v1.router, prefix="/auth")
api_v1.include_router(users_v1.router, prefix="/users")
api_v1.include_router(events_v1.router, prefix="/events")
# Gifts before guests so /guests/gifts is not taken for a guest id
api_v1.include_router(gifts_v1.router, prefix="/guests/gifts")
api_v1.include_router(guests_v1.router, prefix="/guests")
api_v1.include_router(templates_v1.router, prefix="/templates")
api_v1.include_router(template_purchases_v1.router, prefix="/template-purchases")
api_v1.include_router(subscription_plans_v1.router, prefix="/subscription-plans")
api_v1.include_router(subscriptions_v1.router, prefix="/subscriptions")
api_v1.include_router(upload_v1.router, prefix="/upload")
api_v1.include_router(payments_v1.router, prefix="/payments")
api_v1.include_router(payment_logs_v1.router, prefix="/payment-logs")
api_v1.include_router(blogs_v1.router, prefix="/blogs")
api_v1.include_router(jobs_v1.router, prefix="/jobs")
api_v1.include_router(applications_v1.router, prefix="/applications")
api_v1.include_router(admin_v1.router, prefix="/admin")
api_v1.include_router(audit_logs_v1.router, prefix="/audit-logs")

app.include_router(api_v1)

# Unversioned health check and metrics for load balancers and Prometheus
app.include_router(health_v1.router)
app.include_router(prometheus.router)

app.mount(
    "/uploads",
    StaticFiles(directory=settings.storage_local_path, check_dir=False),
    name="uploads",
)


@app.get("/")
def root():
    return {"message": f"{API_TITLE} is running", "version": API_VERSION}
