from .base import ApiClient


class ScheduleAPI:
    def __init__(self, client: ApiClient):
        self.client = client
        self.path = "/schedule"

    async def create(self, data: dict):
        return await self.client.request(
            "POST", f"{self.path}/create", "An error occurred while trying to create schedule", json=data
        )

    async def update(self, data: dict):
        return await self.client.request(
            "POST", f"{self.path}/update", "An error occurred while trying to update schedule", json=data
        )

    async def remove_slot(self, schedule_id, slot: str):
        return await self.client.request(
            "POST",
            f"{self.path}/remove-slot",
            "An error occurred while trying to remove time slot",
            json={"scheduleId": schedule_id, "slot": slot},
        )

    async def delete(self, schedule_id):
        return await self.client.request(
            "POST",
            f"{self.path}/delete",
            "An error occurred while trying to delete schedule",
            json={"scheduleId": schedule_id},
        )

    async def get(self, schedule_id):
        return await self.client.request(
            "GET", f"{self.path}/{schedule_id}", "An error occurred while trying to get schedule"
        )

    async def get_all(self):
        return await self.client.request("GET", self.path, "An error occurred while trying to get schedules")

    async def get_by_date(self, date: str):
        """Schedule for a YYYY-MM-DD day, or None when the salon is closed"""
        return await self.client.request(
            "POST", f"{self.path}/date", "An error occurred while trying to get schedule", json={"date": date}
        )
