"""Organization settings: the village office profile shown across the portal."""

from fastapi import APIRouter

from app.api.v1.auth import Actor, StoresDep
from app.schemas.template import OrganizationProfile
from app.services import templates

router = APIRouter()


@router.get("/organization", response_model=OrganizationProfile)
def get_organization(actor: Actor, stores: StoresDep) -> OrganizationProfile:
    return templates.get_organization(stores.organization, actor)


@router.put("/organization", response_model=OrganizationProfile)
def update_organization(
    body: OrganizationProfile,
    actor: Actor,
    stores: StoresDep,
) -> OrganizationProfile:
    """Replace the organization profile (admin only)."""
    return templates.update_organization(stores.organization, actor, body)
