from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_subscriber
from app.schemas.dashboard import DashboardAlert, DashboardRead
from app.services import entitlement
from app.services.common import business_today, utcnow
from app.services.dashboard import DashboardService
from app.services.profile import ProfileService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardRead)
def get_dashboard(
    subscriber_id: UUID = Depends(require_subscriber),
    db: Session = Depends(get_db),
):
    profile = ProfileService(db).get(subscriber_id)
    now = utcnow()
    today = business_today(now)
    svc = DashboardService(db)
    stats = svc.stats(profile.id)
    return {
        "stats": stats,
        "revenue": svc.revenue(profile.id, today),
        "alerts": svc.due_alerts(profile.id, today),
        "entitlement": entitlement.describe(
            profile, now, property_count=stats.total_properties
        ),
    }


@router.get("/alerts", response_model=list[DashboardAlert])
def get_due_alerts(
    subscriber_id: UUID = Depends(require_subscriber),
    db: Session = Depends(get_db),
):
    profile = ProfileService(db).get(subscriber_id)
    return DashboardService(db).due_alerts(profile.id, business_today(utcnow()))
