import json
from typing import Optional, Union

from .base import ApiClient


class MediaAPI:
    def __init__(self, client: ApiClient):
        self.client = client
        self.path = "/media"

    async def get_media(self, tag: Optional[str] = None, type: Optional[str] = None):
        params = {}
        if tag:
            params["tag"] = tag
        if type:
            params["type"] = type
        return await self.client.request(
            "GET", self.path, "An error occurred while trying to get media", params=params or None
        )

    async def upload_media(
        self,
        file_name: str,
        content: bytes,
        content_type: str,
        tags: Union[str, list[str]],
        type: str = "Image",
    ):
        tag_value = json.dumps(tags) if isinstance(tags, list) else tags
        return await self.client.request(
            "POST",
            f"{self.path}/create",
            "An error occurred while trying to upload media",
            data={"type": type, "tag": tag_value},
            files={"file": (file_name, content, content_type)},
        )

    async def delete_media(self, media_id):
        return await self.client.request(
            "POST", f"{self.path}/delete", "An error occurred while trying to delete media", json={"id": media_id}
        )

    def drive_url(self, drive_id: Optional[str]) -> Optional[str]:
        if not drive_id:
            return None
        return self.client.url_for(f"{self.path}/drive/{drive_id}")
