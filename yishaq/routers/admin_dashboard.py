from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from yishaq.db import get_db
from yishaq.routers.deps import require_admin
from yishaq.services.auth import Identity
from yishaq.services.stats import dashboard_stats
from yishaq.utils.serializers import order_summary_to_dict

router = APIRouter(prefix="/admin", tags=["admin-dashboard"])


@router.get("/stats")
def stats(db: Session = Depends(get_db), admin: Identity = Depends(require_admin)):
    data = dashboard_stats(db)
    return {
        "success": True,
        "stats": data["stats"],
        "recentOrders": [order_summary_to_dict(o) for o in data["recent_orders"]],
    }
