from typing import Optional
from urllib.parse import urlencode

from ..security_utils import sha256_hex
from .base import ApiClient
from .persistence import CSRF_TOKEN_KEY, USER_KEY, PersistStore


class AuthAPI:
    def __init__(self, client: ApiClient, store: Optional[PersistStore] = None):
        self.client = client
        self.store = store
        self.path = "/user"

    def login_url(self, mode: str = "login", signup_code: Optional[str] = None) -> str:
        """
        Where the browser goes to start Google sign-in.
        Signup links carry the sha256 hex of the code, never the code itself.
        """
        params = {"mode": mode}
        if mode == "signup":
            params["signupcode"] = sha256_hex(signup_code or "")
        return self.client.url_for(f"{self.path}/login?{urlencode(params)}")

    def complete_login(self, user_id, csrf_token: str) -> None:
        """Keep what the login redirect handed back (?userId=..&token=..)"""
        self.client.set_csrf_token(csrf_token)
        if self.store is not None:
            self.store.set(USER_KEY, {"_id": user_id})
            self.store.set(CSRF_TOKEN_KEY, csrf_token)

    async def get_authenticated_user(self, user_id):
        return await self.client.request(
            "GET", f"{self.path}/{user_id}", "An error occurred while trying to get authenticated user"
        )

    async def get_customers(self):
        return await self.client.request(
            "GET", f"{self.path}/customer", "An error occurred while trying to get customers"
        )

    async def get_customer(self, customer_id):
        return await self.client.request(
            "GET", f"{self.path}/customer/{customer_id}", "An error occurred while trying to get customer"
        )

    async def unblock_customer(self, customer_id):
        return await self.client.request(
            "GET",
            f"{self.path}/customer/unblock/{customer_id}",
            "An error occurred while trying to unblock customer",
        )

    async def logout(self, user_id):
        content = await self.client.request(
            "GET", f"{self.path}/logout/{user_id}", "An error occurred while trying to logout"
        )
        self.client.set_csrf_token(None)
        if self.store is not None:
            self.store.remove(USER_KEY)
            self.store.remove(CSRF_TOKEN_KEY)
        return content
