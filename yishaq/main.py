import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from yishaq import config
from yishaq.db import Base, engine
from yishaq.errors import ShopError
from yishaq.logging_config import configure_logging
from yishaq.middleware.request_id import RESPONSE_HEADER, RequestIdMiddleware

# models must be imported before create_all()
import yishaq.models  # noqa: F401

from yishaq.routers import admin_dashboard, admin_orders, admin_products, auth, checkout, orders, products, users

logger = logging.getLogger("yishaq.app")


# ==== FastAPI app ====
app = FastAPI(title=config.APP_NAME)

# signed cookie session, holds only the user id
app.add_middleware(
    SessionMiddleware,
    secret_key=config.SECRET_KEY,
    session_cookie="auth_token",
    max_age=config.SESSION_MAX_AGE_DAYS * 24 * 3600,
    same_site="strict",
    https_only=config.ENV == "production",
)
app.add_middleware(RequestIdMiddleware)


# ==== Errors ====
@app.exception_handler(ShopError)
async def shop_error_handler(request: Request, exc: ShopError):
    if exc.status_code >= 500:
        logger.error("request failed", extra={"error": type(exc).__name__, "path": request.url.path})
    return JSONResponse({"success": False, "error": exc.message}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("invalid request body", extra={"path": request.url.path, "errors": len(exc.errors())})
    return JSONResponse({"success": False, "error": "Datos de la solicitud inválidos"}, status_code=400)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # internal details stay in the log
    logger.exception("unhandled error", extra={"path": request.url.path})
    response = JSONResponse({"success": False, "error": "Error del servidor"}, status_code=500)
    # the request id middleware never sees this response
    rid = getattr(request.state, "request_id", None)
    if rid:
        response.headers[RESPONSE_HEADER] = rid
    return response


# ==== Routers ====
app.include_router(products.router)
app.include_router(checkout.router)
app.include_router(orders.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(admin_orders.router)
app.include_router(admin_products.router)
app.include_router(admin_dashboard.router)


@app.get("/health")
def health():
    return {"ok": True}


@app.on_event("startup")
def startup_event():
    configure_logging()
    Base.metadata.create_all(bind=engine)
    logger.info("application started", extra={"env": config.ENV})
