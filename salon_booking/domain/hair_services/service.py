"""Hair service catalog - services, their categories and optional add-ons"""

import logging
from typing import Optional

from fastapi import HTTPException, UploadFile
from sqlalchemy.orm import Session

from ...models import HairCategory, HairService, ServiceAddOn
from ...security_utils import sanitize_text
from ...services.storage_service import StorageService
from ...shared.timeslots import get_longest_consecutive_time, get_slots_after_start_time
from .repository import HairServiceRepository
from .schemas import (
    AddOnCreate,
    AddOnUpdate,
    AvailableServicesRequest,
    HairServiceCreate,
    HairServiceUpdate,
)

logger = logging.getLogger(__name__)


def group_by_category(services: list[HairService]) -> dict[str, list[dict]]:
    grouped: dict[str, list[dict]] = {}
    for service in services:
        grouped.setdefault(service.category, []).append(service.to_dict())
    return grouped


class CatalogService:
    """Service layer for the hair service catalog"""

    def __init__(self, db: Session, storage: Optional[StorageService] = None):
        self.db = db
        self.storage = storage
        self.repo = HairServiceRepository()

    async def _upload_cover(self, file: UploadFile) -> dict:
        data = await file.read()
        return self.storage.upload_file(data, file.content_type, folder="category")

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    def add_service(self, data: HairServiceCreate) -> HairService:
        if not data.title:
            raise HTTPException(status_code=400, detail="Hair service title is required")
        if not data.price:
            raise HTTPException(status_code=400, detail="Hair service price is required")
        if not data.category:
            raise HTTPException(status_code=400, detail="Hair service category is required")
        if not data.duration:
            raise HTTPException(status_code=400, detail="Hair service duration is required")

        if not self.repo.get_category_by_title(self.db, data.category):
            raise HTTPException(status_code=404, detail="Category not found")
        if self.repo.get_service_by_title(self.db, data.title, data.category):
            raise HTTPException(status_code=400, detail="Hair service already exists in this category")

        logger.info(f"📥 Adding hair service '{data.title}' to {data.category}")
        return self.repo.create(
            self.db,
            HairService(title=data.title, price=data.price, category=data.category, duration=data.duration),
        )

    def update_service(self, data: HairServiceUpdate) -> HairService:
        service = self.repo.get_service_by_id(self.db, data.id) if data.id else None
        if not service:
            raise HTTPException(status_code=404, detail="Hair service was not found")

        new_title = data.title or service.title
        new_category = data.category or service.category
        if new_category != service.category and not self.repo.get_category_by_title(self.db, new_category):
            raise HTTPException(status_code=404, detail="Category not found")
        if (new_title, new_category) != (service.title, service.category):
            if self.repo.get_service_by_title(self.db, new_title, new_category):
                raise HTTPException(status_code=400, detail="Hair service already exists in this category")

        if new_title != service.title:
            # Add-ons reference their service by title
            for add_on in self.repo.get_add_ons_for_service(self.db, service.title):
                add_on.service = new_title

        service.title = new_title
        service.category = new_category
        if data.price is not None:
            service.price = data.price
        if data.duration is not None:
            service.duration = data.duration
        return self.repo.save(self.db, service)

    def remove_service(self, service_id: int) -> str:
        self.repo.delete_by_id(self.db, HairService, service_id)
        return "deleted"

    def get_services_by_category(self) -> dict[str, list[dict]]:
        return group_by_category(self.repo.get_all_services(self.db))

    def get_available_services(self, data: AvailableServicesRequest) -> dict[str, list[dict]]:
        """Services that fit into the unbroken run of open hours starting at startTime"""
        schedule = self.repo.get_schedule_by_id(self.db, data.scheduleId) if data.scheduleId else None
        if not schedule:
            raise HTTPException(status_code=404, detail="Schedule not found")

        slots = list(schedule.available_slots or [])
        if data.startTime:
            try:
                slots = get_slots_after_start_time(slots, data.startTime)
            except ValueError as e:
                raise HTTPException(status_code=400, detail="Invalid start time") from e

        longest = get_longest_consecutive_time(slots)
        logger.debug(f"Available services from {data.startTime}: {longest} consecutive hours")

        fitting = [s for s in self.repo.get_all_services(self.db) if s.duration <= longest]
        return group_by_category(fitting)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def add_category(self, title: Optional[str], file: Optional[UploadFile]) -> HairCategory:
        if not file:
            raise HTTPException(status_code=400, detail="File is missing")
        title = sanitize_text(title, max_length=255)
        if not title:
            raise HTTPException(status_code=400, detail="Hair service title is required")
        if self.repo.get_category_by_title(self.db, title):
            raise HTTPException(status_code=400, detail="Category already exists")

        stored = await self._upload_cover(file)
        logger.info(f"📥 Adding category '{title}'")
        return self.repo.create(
            self.db, HairCategory(title=title, cover_link=stored["publicUrl"], drive_id=stored["driveId"])
        )

    async def update_category(
        self, category_id: Optional[int], title: Optional[str], file: Optional[UploadFile]
    ) -> HairCategory:
        if not category_id:
            raise HTTPException(status_code=400, detail="Invalid request argument")
        category = self.repo.get_category_by_id(self.db, category_id)
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")

        title = sanitize_text(title, max_length=255)
        if title and title != category.title:
            if self.repo.get_category_by_title(self.db, title):
                raise HTTPException(status_code=400, detail="Category already exists")
            for service in self.repo.get_services_in_category(self.db, category.title):
                service.category = title
            category.title = title

        if file:
            old_drive_id = category.drive_id
            stored = await self._upload_cover(file)
            category.cover_link = stored["publicUrl"]
            category.drive_id = stored["driveId"]
            self.storage.delete_file(old_drive_id)

        return self.repo.save(self.db, category)

    def remove_category(self, category_id: int) -> str:
        category = self.repo.get_category_by_id(self.db, category_id)
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")

        self.storage.delete_file(category.drive_id)
        removed = self.repo.delete_services_in_category(self.db, category.title)
        self.db.delete(category)
        self.db.commit()
        logger.info(f"🗑️ Category {category_id} deleted with {removed} service(s)")
        return "deleted"

    def get_categories(self) -> list[HairCategory]:
        return self.repo.get_all_categories(self.db)

    # ------------------------------------------------------------------
    # Add-ons
    # ------------------------------------------------------------------

    def add_add_on(self, data: AddOnCreate) -> ServiceAddOn:
        if not data.title:
            raise HTTPException(status_code=400, detail="Add on title is required")
        if not data.price:
            raise HTTPException(status_code=400, detail="Add on price is required")
        if not data.duration:
            raise HTTPException(status_code=400, detail="Add on duration is required")

        return self.repo.create(
            self.db,
            ServiceAddOn(title=data.title, price=data.price, service=data.service or None, duration=data.duration),
        )

    def update_add_on(self, data: AddOnUpdate) -> ServiceAddOn:
        add_on = self.repo.get_add_on_by_id(self.db, data.id) if data.id else None
        if not add_on:
            raise HTTPException(status_code=404, detail="Addon not found")

        if data.title:
            add_on.title = data.title
        if data.price is not None:
            add_on.price = data.price
        if data.duration is not None:
            add_on.duration = data.duration
        if data.service is not None:
            add_on.service = data.service or None
        return self.repo.save(self.db, add_on)

    def remove_add_on(self, add_on_id: int) -> str:
        self.repo.delete_by_id(self.db, ServiceAddOn, add_on_id)
        return "deleted"

    def get_add_ons(self) -> list[ServiceAddOn]:
        return self.repo.get_all_add_ons(self.db)
