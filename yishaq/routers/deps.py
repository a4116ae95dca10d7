from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from yishaq.db import get_db
from yishaq.errors import Forbidden, Unauthorized
from yishaq.services.auth import Identity, resolve_identity


def current_identity(request: Request, db: Session = Depends(get_db)) -> Optional[Identity]:
    return resolve_identity(db, request.session)


def require_user(identity: Optional[Identity] = Depends(current_identity)) -> Identity:
    if identity is None:
        raise Unauthorized("No autenticado")
    return identity


def require_admin(identity: Optional[Identity] = Depends(current_identity)) -> Identity:
    if identity is None:
        raise Unauthorized()
    if not identity.is_admin:
        raise Forbidden()
    return identity
