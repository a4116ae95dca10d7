from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from yishaq.db import get_db
from yishaq.routers.deps import require_user
from yishaq.schemas import ProfileUpdateIn
from yishaq.services.auth import Identity, update_profile
from yishaq.utils.serializers import user_to_dict

router = APIRouter(prefix="/users", tags=["users"])

MESSAGES = {
    "profile": "Información actualizada correctamente",
    "address": "Dirección actualizada correctamente",
}


@router.put("/profile")
def profile_update(payload: ProfileUpdateIn, db: Session = Depends(get_db), identity: Identity = Depends(require_user)):
    user = update_profile(db, identity.user_id, payload.type, payload.data)
    return {"success": True, "message": MESSAGES[payload.type], "user": user_to_dict(user)}
