from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from tourportal.api import (
    admin_destinations,
    admin_orders,
    admin_reviews,
    admin_tours,
    admin_users,
    destinations,
    favorites,
    health,
    manager_destinations,
    manager_tickets,
    manager_tours,
    orders,
    profile,
    reviews,
    statistics,
    tickets,
    tours,
)
from tourportal.auth import routes as auth_routes
from tourportal.core.config import CORS_ORIGINS, LOG_LEVEL
from tourportal.core.errors import ApiError, Internal, InvalidInput
from tourportal.middleware.request_logger import RequestLoggerMiddleware
from tourportal.services.bootstrap_db import create_all
from tourportal.services.validation import Violation

# ---- Logging config ---------------------------------------------------------
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s:%(lineno)d - %(message)s",
)
logger = logging.getLogger("tourportal.main")
logger.info("Starting tourportal backend with LOG_LEVEL=%s", LOG_LEVEL)

# ---- FastAPI app ------------------------------------------------------------
app = FastAPI(title="Tour Portal API")
app.add_middleware(RequestLoggerMiddleware)

# ---- CORS -------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---- Error rendering --------------------------------------------------------
# Every error leaves as {"error": str, "details"?: object}
@app.exception_handler(ApiError)
async def _api_error(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def _request_validation_error(request: Request, exc: RequestValidationError):
    violations = []
    for e in exc.errors():
        # loc is ("query", "limit") or ("body", ...); the source prefix is dropped
        loc = [str(p) for p in e.get("loc", ())]
        field = ".".join(loc[1:]) or (loc[0] if loc else "request")
        violations.append(Violation(field, e.get("msg", "Invalid value")))
    err = InvalidInput(violations)
    return JSONResponse(status_code=err.status_code, content=err.to_body())


@app.exception_handler(SQLAlchemyError)
async def _db_error(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=Internal().to_body())


@app.exception_handler(Exception)
async def _unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=Internal().to_body())


# ---- Routers ----------------------------------------------------------------
# Public catalog
app.include_router(destinations.router)
app.include_router(tours.router)
app.include_router(reviews.router)
# Sessions
app.include_router(auth_routes.router)        # /api/auth/*
# Signed-in users
app.include_router(profile.router)            # /api/user/*
app.include_router(orders.router)
app.include_router(favorites.router)
app.include_router(tickets.router)
# Admin console
app.include_router(admin_users.router)
app.include_router(admin_destinations.router)
app.include_router(admin_tours.router)
app.include_router(admin_reviews.router)
app.include_router(admin_orders.router)       # managers too
# Manager console
app.include_router(manager_destinations.router)
app.include_router(manager_tours.router)
app.include_router(manager_tickets.router)
app.include_router(statistics.router)         # /api/admin/statistics, /api/manager/statistics
# Health + introspection
app.include_router(health.router, prefix="/health", tags=["Health"])

logger.info("Routers registered.")


# ---- Startup ----------------------------------------------------------------
@app.on_event("startup")
def _startup() -> None:
    # Auto-create tables (safe to run repeatedly)
    create_all()
    logger.info("Startup completed.")
