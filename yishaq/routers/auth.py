import time
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from yishaq import config
from yishaq.db import get_db
from yishaq.errors import TooManyAttempts, Unauthorized, ValidationError
from yishaq.models.user import User
from yishaq.routers.deps import current_identity
from yishaq.schemas import LoginIn, RegisterIn
from yishaq.services.auth import SESSION_USER_KEY, authenticate, register_user
from yishaq.utils.serializers import user_to_dict

logger = logging.getLogger("yishaq.auth")

router = APIRouter(prefix="/auth", tags=["auth"])

login_attempts = {}  # {"ip": {"count": int, "last": timestamp}}


def check_rate_limit(ip: str) -> bool:
    now = time.time()
    data = login_attempts.get(ip)
    if not data:
        return True
    # still blocked
    if data["count"] >= config.LOGIN_MAX_ATTEMPTS and now - data["last"] < config.LOGIN_BLOCK_SECONDS:
        return False
    return True


def add_attempt(ip: str):
    now = time.time()
    attempts = login_attempts.get(ip)
    if not attempts or now - attempts["last"] > config.LOGIN_BLOCK_SECONDS:
        login_attempts[ip] = {"count": 1, "last": now}
    else:
        attempts["count"] += 1
        attempts["last"] = now


def reset_attempts(ip: str):
    login_attempts.pop(ip, None)


def _start_session(request: Request, user: User) -> None:
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id


@router.post("/login")
def login(payload: LoginIn, request: Request, db: Session = Depends(get_db)):
    if not payload.email or not payload.password:
        raise ValidationError("Email y contraseña son requeridos")

    client_ip = request.client.host if request.client else "-"
    if not check_rate_limit(client_ip):
        raise TooManyAttempts()

    try:
        user = authenticate(db, payload.email, payload.password)
    except Unauthorized:
        add_attempt(client_ip)
        logger.warning("login failed", extra={"client_ip": client_ip})
        raise

    reset_attempts(client_ip)
    _start_session(request, user)
    logger.info("login", extra={"user_id": user.id, "role": user.role})
    return {"success": True, "user": user_to_dict(user), "message": "Inicio de sesión exitoso"}


@router.post("/register", status_code=201)
def register(payload: RegisterIn, request: Request, db: Session = Depends(get_db)):
    user = register_user(db, payload.email, payload.password, payload.first_name, payload.last_name)
    _start_session(request, user)
    return {"success": True, "user": user_to_dict(user)}


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"success": True}


@router.get("/me")
def me(db: Session = Depends(get_db), identity=Depends(current_identity)):
    if identity is None:
        return {"success": False, "user": None}
    return {"success": True, "user": user_to_dict(db.get(User, identity.user_id))}
