from typing import Optional

from .base import ApiClient


class HairServiceAPI:
    def __init__(self, client: ApiClient):
        self.client = client
        self.path = "/hair-service"

    # Add

    async def add_service(self, data: dict):
        return await self.client.request(
            "POST", f"{self.path}/service", "An error occurred while trying to add service", json=data
        )

    async def add_category(self, title: str, file_name: str, content: bytes, content_type: str):
        return await self.client.request(
            "POST",
            f"{self.path}/category",
            "An error occurred while trying to add category",
            data={"title": title},
            files={"file": (file_name, content, content_type)},
        )

    async def add_add_on(self, data: dict):
        return await self.client.request(
            "POST", f"{self.path}/add-on", "An error occurred while trying to add add-on", json=data
        )

    # Remove

    async def remove_service(self, service_id):
        return await self.client.request(
            "POST", f"{self.path}/service/{service_id}", "An error occurred while trying to remove service"
        )

    async def remove_category(self, category_id):
        return await self.client.request(
            "POST", f"{self.path}/category/{category_id}", "An error occurred while trying to remove category"
        )

    async def remove_add_on(self, add_on_id):
        return await self.client.request(
            "POST", f"{self.path}/add-on/{add_on_id}", "An error occurred while trying to remove add-on"
        )

    # Update

    async def update_service(self, data: dict):
        return await self.client.request(
            "POST", f"{self.path}/update/service", "An error occurred while trying to update service", json=data
        )

    async def update_category(
        self,
        category_id,
        title: Optional[str] = None,
        file_name: Optional[str] = None,
        content: Optional[bytes] = None,
        content_type: Optional[str] = None,
    ):
        form = {"id": str(category_id)}
        if title:
            form["title"] = title
        files = {"file": (file_name, content, content_type)} if content is not None else None
        return await self.client.request(
            "POST",
            f"{self.path}/update/category",
            "An error occurred while trying to update category",
            data=form,
            files=files,
        )

    async def update_add_on(self, data: dict):
        return await self.client.request(
            "POST", f"{self.path}/update/add-on", "An error occurred while trying to update add-on", json=data
        )

    # Get

    async def get_services(self) -> dict:
        """Services grouped by category title"""
        return await self.client.request("GET", self.path, "An error occurred while trying to get services")

    async def get_categories(self):
        return await self.client.request(
            "GET", f"{self.path}/category", "An error occurred while trying to get categories"
        )

    async def get_add_ons(self):
        return await self.client.request(
            "GET", f"{self.path}/add-on", "An error occurred while trying to get add-ons"
        )

    async def get_available_services(self, schedule_id, start_time: str) -> dict:
        return await self.client.request(
            "POST",
            f"{self.path}/available",
            "An error occurred while trying to get available services for schedule",
            json={"scheduleId": schedule_id, "startTime": start_time},
        )
