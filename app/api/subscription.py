from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_subscriber
from app.errors import ProfileNotFound
from app.schemas.billing import EntitlementRead
from app.services import entitlement
from app.services.dashboard import DashboardService
from app.services.profile import load_profile_with_retry

router = APIRouter(prefix="/subscription", tags=["subscription"])


@router.get("", response_model=EntitlementRead)
def get_subscription(
    subscriber_id: UUID = Depends(require_subscriber),
    db: Session = Depends(get_db),
):
    # Sign-up writes the profile asynchronously; give it a moment to appear
    profile = load_profile_with_retry(db, subscriber_id)
    if profile is None:
        raise ProfileNotFound()
    property_count = DashboardService(db).property_count(profile.id)
    return entitlement.describe(profile, property_count=property_count)
