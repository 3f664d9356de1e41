"""Hair service router - catalog endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import Admin
from ...rate_limiter import hair_service_rate_limit
from ...services.storage_service import StorageService, get_storage
from ...shared.envelope import envelope
from .schemas import (
    AddOnCreate,
    AddOnUpdate,
    AvailableServicesRequest,
    HairServiceCreate,
    HairServiceUpdate,
)
from .service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/hair-service", tags=["Hair Services"])


def get_catalog_service(
    db: Session = Depends(get_db), storage: StorageService = Depends(get_storage)
) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db, storage)


# ============================================================================
# ADD
# ============================================================================


@router.post("/service", status_code=201)
async def add_hair_service(
    data: HairServiceCreate,
    admin: Admin = Depends(get_current_admin),
    catalog: CatalogService = Depends(get_catalog_service),
    _: None = Depends(hair_service_rate_limit),
):
    return envelope(True, catalog.add_service(data).to_dict())


@router.post("/category", status_code=201)
async def add_category(
    title: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    admin: Admin = Depends(get_current_admin),
    catalog: CatalogService = Depends(get_catalog_service),
    _: None = Depends(hair_service_rate_limit),
):
    """Create a category with its cover image (multipart: title, file)"""
    category = await catalog.add_category(title, file)
    return envelope(True, category.to_dict())


@router.post("/add-on", status_code=201)
async def add_add_on(
    data: AddOnCreate,
    admin: Admin = Depends(get_current_admin),
    catalog: CatalogService = Depends(get_catalog_service),
    _: None = Depends(hair_service_rate_limit),
):
    return envelope(True, catalog.add_add_on(data).to_dict())


# ============================================================================
# DELETE
# ============================================================================


@router.post("/service/{service_id}")
async def remove_hair_service(
    service_id: int,
    admin: Admin = Depends(get_current_admin),
    catalog: CatalogService = Depends(get_catalog_service),
    _: None = Depends(hair_service_rate_limit),
):
    return envelope(True, catalog.remove_service(service_id))


@router.post("/category/{category_id}")
async def remove_category(
    category_id: int,
    admin: Admin = Depends(get_current_admin),
    catalog: CatalogService = Depends(get_catalog_service),
    _: None = Depends(hair_service_rate_limit),
):
    """Delete a category, its services and its stored cover image"""
    return envelope(True, catalog.remove_category(category_id))


@router.post("/add-on/{add_on_id}")
async def remove_add_on(
    add_on_id: int,
    admin: Admin = Depends(get_current_admin),
    catalog: CatalogService = Depends(get_catalog_service),
    _: None = Depends(hair_service_rate_limit),
):
    return envelope(True, catalog.remove_add_on(add_on_id))


# ============================================================================
# UPDATE
# ============================================================================


@router.post("/update/service")
async def update_hair_service(
    data: HairServiceUpdate,
    admin: Admin = Depends(get_current_admin),
    catalog: CatalogService = Depends(get_catalog_service),
    _: None = Depends(hair_service_rate_limit),
):
    return envelope(True, catalog.update_service(data).to_dict())


@router.post("/update/category")
async def update_category(
    id: Optional[int] = Form(None),
    title: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    admin: Admin = Depends(get_current_admin),
    catalog: CatalogService = Depends(get_catalog_service),
    _: None = Depends(hair_service_rate_limit),
):
    category = await catalog.update_category(id, title, file)
    return envelope(True, category.to_dict())


@router.post("/update/add-on")
async def update_add_on(
    data: AddOnUpdate,
    admin: Admin = Depends(get_current_admin),
    catalog: CatalogService = Depends(get_catalog_service),
    _: None = Depends(hair_service_rate_limit),
):
    return envelope(True, catalog.update_add_on(data).to_dict())


# ============================================================================
# GET
# ============================================================================


@router.get("")
async def get_services_by_category(catalog: CatalogService = Depends(get_catalog_service)):
    return envelope(True, catalog.get_services_by_category())


@router.get("/category")
async def get_categories(catalog: CatalogService = Depends(get_catalog_service)):
    return envelope(True, [c.to_dict() for c in catalog.get_categories()])


@router.get("/add-on")
async def get_add_ons(catalog: CatalogService = Depends(get_catalog_service)):
    return envelope(True, [a.to_dict() for a in catalog.get_add_ons()])


@router.post("/available")
async def get_available_services(
    data: AvailableServicesRequest,
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Services that can be finished from the chosen start time"""
    return envelope(True, catalog.get_available_services(data))
