"""Session/role gate and account helpers.

Routers never read the session themselves: they ask ``resolve_identity``
for an ``Identity`` (or ``None``) and hand the user id down explicitly.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from yishaq import config
from yishaq.errors import Unauthorized, ValidationError
from yishaq.models.user import User
from yishaq.utils.enums import UserRole
from yishaq.utils.security import hash_password, verify_password

logger = logging.getLogger("yishaq.auth")

SESSION_USER_KEY = "user_id"
MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def resolve_identity(db: Session, session: Mapping) -> Optional[Identity]:
    """Map a session to an identity; unknown or inactive users resolve to None."""
    user_id = session.get(SESSION_USER_KEY) if session else None
    if not user_id:
        return None
    user = db.get(User, user_id)
    if user is None or not user.is_active:
        return None
    try:
        role = UserRole((user.role or "").strip().lower())
    except ValueError:
        return None
    return Identity(user_id=user.id, role=role)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.execute(select(User).where(User.email == email.strip().lower())).scalar_one_or_none()


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise Unauthorized("Credenciales incorrectas")
    if not user.is_active:
        raise Unauthorized("Cuenta desactivada")
    return user


def register_user(db: Session, email: str, password: str, first_name: str, last_name: str = "") -> User:
    email = (email or "").strip().lower()
    if not email or not password or not (first_name or "").strip():
        raise ValidationError("Email, contraseña y nombre son requeridos")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("La contraseña debe tener al menos {0} caracteres".format(MIN_PASSWORD_LENGTH))
    if get_user_by_email(db, email):
        raise ValidationError("El email ya está registrado")

    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name.strip(),
        last_name=(last_name or "").strip(),
        role=UserRole.CLIENT.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("user registered", extra={"user_id": user.id})
    return user


PROFILE_UPDATES = ("profile", "address")


def _text(data: Mapping, key: str) -> str:
    value = data.get(key)
    return str(value).strip() if value is not None else ""


def update_profile(db: Session, user_id: str, kind: Optional[str], data: Optional[Mapping]) -> User:
    """Update the contact (``profile``) or shipping (``address``) fields of a user."""
    if not kind or not data:
        raise ValidationError("Datos incompletos")
    if kind not in PROFILE_UPDATES:
        raise ValidationError("Tipo de actualización no válido")

    user = db.get(User, user_id)
    if user is None:
        raise Unauthorized("Sesión inválida")

    if kind == "profile":
        first_name, last_name = _text(data, "firstName"), _text(data, "lastName")
        if not first_name or not last_name:
            raise ValidationError("Nombre y apellido son requeridos")
        user.first_name = first_name
        user.last_name = last_name
        user.phone = _text(data, "phone") or None
    else:
        address, city, postal_code = _text(data, "address"), _text(data, "city"), _text(data, "postalCode")
        if not address or not city or not postal_code:
            raise ValidationError("Dirección, ciudad y código postal son requeridos")
        user.address = address
        user.city = city
        user.postal_code = postal_code
        user.country = _text(data, "country") or config.DEFAULT_COUNTRY

    user.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(user)
    logger.info("profile updated", extra={"user_id": user.id, "kind": kind})
    return user
