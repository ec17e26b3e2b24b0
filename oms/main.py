import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from oms.core.config import settings
from oms.core.logging_setup import configure_logging

from oms.api.health import router as health_router
from oms.api.root import router as root_router
from oms.api.auth import router as auth_router
from oms.api.invitations import router as invitations_router
from oms.api.employees import router as employees_router
from oms.api.onboarding import router as onboarding_router
from oms.api.documents import router as documents_router
from oms.api.tasks import router as tasks_router
from oms.api.leaves import router as leaves_router
from oms.api.meetings import router as meetings_router
from oms.api.mentors import router as mentors_router
from oms.api.broadcasts import router as broadcasts_router
from oms.api.notifications import router as notifications_router
from oms.api.messages import router as messages_router
from oms.api.welcome_video import router as welcome_video_router
from oms.api.contact import router as contact_router

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Onboarding Management System")

# CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_LOCATION_PARTS = {"body", "query", "path", "form", "header", "cookie"}


def first_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    field = ".".join(str(p) for p in err.get("loc", ()) if p not in _LOCATION_PARTS)
    msg = err.get("msg", "Invalid value")
    return f"{field}: {msg}" if field else msg


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": first_error_message(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Server error"})


app.include_router(root_router)
app.include_router(health_router)

for router in (
    auth_router,
    invitations_router,
    employees_router,
    onboarding_router,
    documents_router,
    tasks_router,
    leaves_router,
    meetings_router,
    mentors_router,
    broadcasts_router,
    notifications_router,
    messages_router,
    welcome_video_router,
    contact_router,
):
    app.include_router(router, prefix=settings.API_PREFIX)
