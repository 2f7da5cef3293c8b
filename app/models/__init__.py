from app.models.profile import Profile, ProfileRole, SubscriptionStatus  # noqa: F401
from app.models.rental import (  # noqa: F401
    Property,
    PropertyStatus,
    Receipt,
    ReceiptKind,
    Tenant,
    TenantStatus,
)
