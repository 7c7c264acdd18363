"""Document templates and the organization profile (admin-managed portal content)."""

import logging
import uuid

from app.core.config import Settings, get_settings
from app.core.errors import NotFound
from app.schemas.auth import CurrentUser
from app.schemas.template import OrganizationProfile, TemplateCreate, TemplateRecord
from app.services.access_policy import Action, authorize
from app.services.uploads import ensure_uploaded
from app.storage.base import TEMPLATE_NOT_FOUND, Clock, OrganizationStore, TemplateStore, utcnow

logger = logging.getLogger(__name__)


def list_templates(store: TemplateStore, actor: CurrentUser | None) -> list[TemplateRecord]:
    authorize(actor, Action.LIST_TEMPLATES)
    return store.list_all()


def create_template(
    store: TemplateStore,
    actor: CurrentUser | None,
    body: TemplateCreate,
    settings: Settings | None = None,
    clock: Clock = utcnow,
) -> TemplateRecord:
    actor = authorize(actor, Action.MANAGE_TEMPLATES)
    ensure_uploaded(body.files, settings or get_settings())
    record = store.create(
        TemplateRecord(
            id=str(uuid.uuid4()),
            name=body.name,
            type=body.type,
            description=body.description,
            files=body.files,
            created_by=actor.id,
            created_at=clock(),
        )
    )
    logger.info("Template saved", extra={"template_id": record.id, "admin_id": actor.id})
    return record


def delete_template(store: TemplateStore, actor: CurrentUser | None, template_id: str) -> None:
    actor = authorize(actor, Action.MANAGE_TEMPLATES)
    if store.get(template_id) is None:
        raise NotFound(TEMPLATE_NOT_FOUND)
    store.delete(template_id)
    logger.info("Template deleted", extra={"template_id": template_id, "admin_id": actor.id})


def get_organization(store: OrganizationStore, actor: CurrentUser | None) -> OrganizationProfile:
    authorize(actor, Action.READ_ORGANIZATION)
    return store.get()


def update_organization(
    store: OrganizationStore,
    actor: CurrentUser | None,
    body: OrganizationProfile,
) -> OrganizationProfile:
    actor = authorize(actor, Action.UPDATE_ORGANIZATION)
    profile = store.save(body)
    logger.info("Organization profile updated", extra={"admin_id": actor.id})
    return profile
