import logging
import re
import time
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ProfileNotFound
from app.models.profile import Profile, ProfileRole, SubscriptionStatus
from app.services.common import coerce_uuid, utcnow
from app.services.entitlement import trial_expires_at

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")
CONTACT_FIELDS = frozenset({"full_name", "cpf", "phone"})


def only_digits(value: str | None) -> str | None:
    if value is None:
        return None
    digits = _NON_DIGITS.sub("", value)
    return digits or None


def is_valid_cpf(value: str | None) -> bool:
    """Check a CPF's length and both verification digits (punctuation ignored)."""
    digits = only_digits(value)
    if not digits or len(digits) != 11 or digits == digits[0] * 11:
        return False
    numbers = [int(d) for d in digits]
    for position in (9, 10):
        total = sum(
            numbers[i] * (position + 1 - i) for i in range(position)
        )
        check = (total * 10) % 11 % 10
        if numbers[position] != check:
            return False
    return True


def _normalize_cpf(value: str | None) -> str | None:
    cpf = only_digits(value)
    if cpf is not None and not is_valid_cpf(cpf):
        raise HTTPException(status_code=400, detail="Invalid CPF")
    return cpf


def load_profile_with_retry(
    db: Session,
    subscriber_id: UUID | str,
    attempts: int = 3,
    interval: float = 0.5,
    sleep: Callable[[float], None] | None = None,
) -> Profile | None:
    """Look up a profile that may not be visible yet right after sign-up.

    Tries ``attempts`` times, sleeping ``interval`` seconds in between, and
    returns None once they are used up.
    """
    sleep = sleep or time.sleep
    profile_id = coerce_uuid(subscriber_id)
    for attempt in range(1, attempts + 1):
        profile = db.get(Profile, profile_id)
        if profile is not None:
            return profile
        if attempt < attempts:
            logger.debug(
                "Profile %s not found (attempt %d/%d)", profile_id, attempt, attempts
            )
            sleep(interval)
            db.expire_all()
    logger.warning("Profile %s not found after %d attempts", profile_id, attempts)
    return None


class ProfileService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, subscriber_id: UUID | str) -> Profile:
        profile = self.db.get(Profile, coerce_uuid(subscriber_id))
        if not profile:
            raise ProfileNotFound()
        return profile

    def create_for_signup(
        self,
        subscriber_id: UUID | str,
        full_name: str,
        email: str,
        cpf: str | None = None,
        phone: str | None = None,
        now: datetime | None = None,
    ) -> Profile:
        """Register a new owner on a seven-day trial."""
        profile_id = coerce_uuid(subscriber_id)
        email = email.strip().lower()
        if self.db.get(Profile, profile_id):
            raise HTTPException(status_code=409, detail="Profile already exists")
        if self.db.scalar(select(Profile.id).where(Profile.email == email)):
            raise HTTPException(status_code=409, detail="Email already registered")

        now = now or utcnow()
        profile = Profile(
            id=profile_id,
            full_name=full_name.strip(),
            email=email,
            cpf=_normalize_cpf(cpf),
            phone=only_digits(phone),
            role=ProfileRole.proprietario,
            subscription_status=SubscriptionStatus.trial,
            expires_at=trial_expires_at(now),
        )
        self.db.add(profile)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(status_code=409, detail="Profile already exists") from exc
        self.db.refresh(profile)
        logger.info("Trial profile created", extra={"subscriber_id": str(profile.id)})
        return profile

    def update_contact(self, profile: Profile, **fields) -> Profile:
        unknown = set(fields) - CONTACT_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if "full_name" in fields:
            full_name = (fields["full_name"] or "").strip()
            if not full_name:
                raise HTTPException(status_code=400, detail="Full name is required")
            profile.full_name = full_name
        if "cpf" in fields:
            profile.cpf = _normalize_cpf(fields["cpf"])
        if "phone" in fields:
            profile.phone = only_digits(fields["phone"])
        self.db.commit()
        self.db.refresh(profile)
        return profile

    def delete_account(self, subscriber_id: UUID | str) -> None:
        """Remove the profile along with its properties, tenants and receipts."""
        profile = self.get(subscriber_id)
        self.db.delete(profile)
        self.db.commit()
        logger.info("Account deleted", extra={"subscriber_id": str(subscriber_id)})
