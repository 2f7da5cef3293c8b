from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_subscriber
from app.schemas.profile import ProfileCreate, ProfileRead, ProfileUpdate
from app.services.profile import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post("/me", response_model=ProfileRead, status_code=201)
def create_my_profile(
    payload: ProfileCreate,
    subscriber_id: UUID = Depends(require_subscriber),
    db: Session = Depends(get_db),
):
    return ProfileService(db).create_for_signup(
        subscriber_id,
        full_name=payload.full_name,
        email=payload.email,
        cpf=payload.cpf,
        phone=payload.phone,
    )


@router.get("/me", response_model=ProfileRead)
def get_my_profile(
    subscriber_id: UUID = Depends(require_subscriber),
    db: Session = Depends(get_db),
):
    return ProfileService(db).get(subscriber_id)


@router.patch("/me", response_model=ProfileRead)
def update_my_profile(
    payload: ProfileUpdate,
    subscriber_id: UUID = Depends(require_subscriber),
    db: Session = Depends(get_db),
):
    svc = ProfileService(db)
    profile = svc.get(subscriber_id)
    return svc.update_contact(profile, **payload.model_dump(exclude_unset=True))


@router.delete("/me", status_code=204)
def delete_my_profile(
    subscriber_id: UUID = Depends(require_subscriber),
    db: Session = Depends(get_db),
):
    ProfileService(db).delete_account(subscriber_id)
