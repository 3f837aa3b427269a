"""Account endpoints: register, login, current user, token refresh, logout."""

from typing import Optional

from ..types import AuthResult, AuthTokens, LoginRequest, RegisterRequest, User
from ._base import AsyncResourceAPI, ResourceAPI, as_model

REGISTER_PATH = "/api/v1/auth/register"
LOGIN_PATH = "/api/v1/auth/login"
ME_PATH = "/api/v1/auth/me"
REFRESH_PATH = "/api/v1/auth/refresh"
LOGOUT_PATH = "/api/v1/auth/logout"


class AuthAPI(ResourceAPI):
    """
    Example:
        >>> result = client.auth.login("ada@example.com", "s3cret-pass")
        >>> result.tokens.access_token
    """

    def register(self, email: str, password: str, name: Optional[str] = None) -> AuthResult:
        body = RegisterRequest(email=email, password=password, name=name).to_body()
        return self._call("POST", REGISTER_PATH, "Registration failed", body,
                          skip_auth=True, parser=as_model(AuthResult))

    def login(self, email: str, password: str) -> AuthResult:
        body = LoginRequest(email=email, password=password).to_body()
        return self._call("POST", LOGIN_PATH, "Login failed", body,
                          skip_auth=True, parser=as_model(AuthResult))

    def me(self) -> User:
        return self._call("GET", ME_PATH, "Failed to get user info", parser=as_model(User))

    def refresh_token(self, refresh_token: str) -> AuthTokens:
        return self._call(
            "POST", REFRESH_PATH, "Token refresh failed",
            {"refreshToken": refresh_token}, skip_auth=True, parser=as_model(AuthTokens),
        )

    def logout(self) -> None:
        self._call_no_content("POST", LOGOUT_PATH, "Logout failed")


class AsyncAuthAPI(AsyncResourceAPI):

    async def register(self, email: str, password: str, name: Optional[str] = None) -> AuthResult:
        body = RegisterRequest(email=email, password=password, name=name).to_body()
        return await self._call("POST", REGISTER_PATH, "Registration failed", body,
                                skip_auth=True, parser=as_model(AuthResult))

    async def login(self, email: str, password: str) -> AuthResult:
        body = LoginRequest(email=email, password=password).to_body()
        return await self._call("POST", LOGIN_PATH, "Login failed", body,
                                skip_auth=True, parser=as_model(AuthResult))

    async def me(self) -> User:
        return await self._call("GET", ME_PATH, "Failed to get user info", parser=as_model(User))

    async def refresh_token(self, refresh_token: str) -> AuthTokens:
        return await self._call(
            "POST", REFRESH_PATH, "Token refresh failed",
            {"refreshToken": refresh_token}, skip_auth=True, parser=as_model(AuthTokens),
        )

    async def logout(self) -> None:
        await self._call_no_content("POST", LOGOUT_PATH, "Logout failed")
