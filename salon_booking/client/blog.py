from typing import Optional

from .base import ApiClient


class BlogAPI:
    def __init__(self, client: ApiClient):
        self.client = client
        self.path = "/blog"

    async def create_post(self, data: dict):
        return await self.client.request(
            "POST", self.path, "An error occurred while trying to create blog post", json=data
        )

    async def get_posts(self, published: Optional[bool] = None):
        params = None if published is None else {"published": "true" if published else "false"}
        return await self.client.request(
            "GET", self.path, "An error occurred while trying to get blog posts", params=params
        )

    async def get_post(self, blog_id):
        return await self.client.request(
            "GET", f"{self.path}/{blog_id}", "An error occurred while trying to get blog post"
        )

    async def get_post_by_slug(self, slug: str):
        return await self.client.request(
            "GET", f"{self.path}/slug/{slug}", "An error occurred while trying to get blog post"
        )

    async def update_post(self, blog_id, data: dict):
        return await self.client.request(
            "PUT", f"{self.path}/{blog_id}", "An error occurred while trying to update blog post", json=data
        )

    async def delete_post(self, blog_id):
        return await self.client.request(
            "DELETE", f"{self.path}/{blog_id}", "An error occurred while trying to delete blog post"
        )
