from typing import Optional

from .base import ApiClient


class BookingAPI:
    def __init__(self, client: ApiClient):
        self.client = client
        self.path = "/booking"

    async def create_booking(self, data: dict):
        return await self.client.request(
            "POST", self.path, "An error occurred while trying to create booking", json=data
        )

    async def get_user_bookings(self, data: dict):
        """Bookings matching a customer's name plus phone or email"""
        return await self.client.request(
            "POST",
            f"{self.path}/find-user-bookings",
            "An error occurred while trying to find bookings",
            json=data,
        )

    async def get_all_bookings(self, data: Optional[dict] = None) -> dict:
        content = await self.client.request(
            "POST", f"{self.path}/get-bookings", "Error while trying to get appointments", json=data or {}
        )
        # Older servers answer with a bare list
        if isinstance(content, list):
            return {"items": content, "total": len(content), "page": 1, "pageSize": len(content)}
        return content

    async def get_booking_summary(self):
        return await self.client.request(
            "GET", f"{self.path}/summary", "An error occurred while trying to get booking summary"
        )

    async def get_booking(self, booking_id):
        return await self.client.request(
            "GET", f"{self.path}/{booking_id}", "An error occurred while trying to get booking"
        )

    async def update_booking(self, data: dict):
        return await self.client.request(
            "POST", f"{self.path}/update", "An error occurred while trying to update booking", json=data
        )

    async def cancel_booking(self, booking_id):
        return await self.client.request(
            "POST",
            f"{self.path}/cancel",
            "An error occurred while trying to cancel booking",
            json={"bookingId": booking_id},
        )

    async def get_income_report(self, data: Optional[dict] = None):
        return await self.client.request(
            "POST",
            f"{self.path}/income-report",
            "An error occurred while trying to get income report",
            json=data or {},
        )
