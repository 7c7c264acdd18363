"""Document template endpoints: listed for everyone signed in, managed by admins."""

from fastapi import APIRouter, status

from app.api.v1.auth import Actor, SettingsDep, StoresDep
from app.schemas.auth import MessageResponse
from app.schemas.template import TemplateCreate, TemplateRecord, TemplatesListResponse
from app.services import templates

router = APIRouter()


@router.get("", response_model=TemplatesListResponse)
def list_templates(actor: Actor, stores: StoresDep) -> TemplatesListResponse:
    return TemplatesListResponse(templates=templates.list_templates(stores.templates, actor))


@router.post("", response_model=TemplateRecord, status_code=status.HTTP_201_CREATED)
def create_template(
    body: TemplateCreate,
    actor: Actor,
    stores: StoresDep,
    settings: SettingsDep,
) -> TemplateRecord:
    """Publish a template; upload its files first and pass the references."""
    return templates.create_template(stores.templates, actor, body, settings=settings)


@router.delete("/{template_id}", response_model=MessageResponse)
def delete_template(template_id: str, actor: Actor, stores: StoresDep) -> MessageResponse:
    templates.delete_template(stores.templates, actor, template_id)
    return MessageResponse(message="Template berhasil dihapus")
