"""
Templates Router - manage metadata templates.
"""
from fastapi import APIRouter, status
from typing import List

from .dependencies import get_db_service
from ..api.exceptions import TemplateNotFoundError
from ..models.schemas import InsertMetadataTemplate, MetadataTemplate

router = APIRouter()


@router.get("/templates", response_model=List[MetadataTemplate])
async def list_templates():
    return await get_db_service().get_all_metadata_templates()


@router.post("/templates", response_model=MetadataTemplate, status_code=status.HTTP_201_CREATED)
async def create_template(template: InsertMetadataTemplate):
    return await get_db_service().create_metadata_template(template.model_dump())


# Registered before /templates/{template_id} so "clear" is not parsed as an id
@router.delete("/templates/clear")
async def clear_templates():
    removed = await get_db_service().clear_metadata_templates()
    return {"success": True, "removed": removed}


@router.delete("/templates/{template_id}")
async def delete_template(template_id: int):
    if not await get_db_service().delete_metadata_template(template_id):
        raise TemplateNotFoundError(f"Template {template_id} not found")
    return {"success": True}
