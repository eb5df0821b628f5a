"""
Client-side auth session plus the sign-in modal and header button state.

Sign in/up/out go straight to Supabase Auth. The admin flag comes from
``GET /api/profile`` and only decides what the UI shows; the upload endpoint
does its own role check.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional

import httpx
import jwt
from pydantic import ValidationError

import config
from client.http import ApiClient, ApiRequestError
from shared.schemas.python import AuthCredentials, AuthenticatedUser, UserProfile

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Sign-in, sign-up or sign-out rejected by Supabase Auth."""


class AuthSession:
    def __init__(
        self,
        *,
        supabase_url: Optional[str] = None,
        anon_key: Optional[str] = None,
        api_base_url: Optional[str] = None,
        api_transport: Optional[httpx.AsyncBaseTransport] = None,
        auth_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.supabase_url = (supabase_url or config.SUPABASE_URL or "").rstrip("/")
        self.anon_key = anon_key or config.SUPABASE_ANON_KEY or ""
        self.api = ApiClient(
            api_base_url,
            token_provider=lambda: self.access_token,
            transport=api_transport,
        )
        self._auth_transport = auth_transport

        self.user: Optional[AuthenticatedUser] = None
        self.profile: Optional[UserProfile] = None
        self.access_token: Optional[str] = None
        self.refresh_token: Optional[str] = None
        self.is_admin = False

    @property
    def is_signed_in(self) -> bool:
        return self.user is not None and bool(self.access_token)

    @property
    def expires_at(self) -> Optional[datetime]:
        """Token expiry from its ``exp`` claim. Unverified; display only."""
        if not self.access_token:
            return None
        try:
            claims = jwt.decode(self.access_token, options={"verify_signature": False})
        except jwt.PyJWTError:
            return None
        exp = claims.get("exp")
        if not isinstance(exp, (int, float)):
            return None
        return datetime.fromtimestamp(exp, tz=timezone.utc)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        expires_at = self.expires_at
        if expires_at is None:
            return False
        return (now or datetime.now(timezone.utc)) >= expires_at

    async def _auth_request(
        self, path: str, payload: Optional[Dict[str, Any]] = None, *, token: Optional[str] = None
    ) -> Dict[str, Any]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token or self.anon_key}",
        }
        try:
            async with httpx.AsyncClient(
                transport=self._auth_transport, timeout=config.SUPABASE_TIMEOUT
            ) as client:
                response = await client.post(
                    f"{self.supabase_url}/auth/v1/{path}", json=payload, headers=headers
                )
        except httpx.RequestError as exc:
            raise AuthError(str(exc) or "Network error") from exc

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}
        if not response.is_success:
            message = None
            if isinstance(data, dict):
                message = data.get("error_description") or data.get("msg") or data.get("message")
            raise AuthError(message or "An error occurred")
        return data if isinstance(data, dict) else {}

    def _apply_session(self, data: Dict[str, Any]) -> None:
        self.access_token = data.get("access_token")
        self.refresh_token = data.get("refresh_token")
        user = data.get("user")
        self.user = AuthenticatedUser.model_validate(user) if user else None

    async def sign_in(self, email: str, password: str) -> AuthenticatedUser:
        data = await self._auth_request(
            "token?grant_type=password", {"email": email, "password": password}
        )
        self._apply_session(data)
        if self.user is None:
            raise AuthError("Sign-in response did not include a user")
        logger.info("Signed in as %s", self.user.email or self.user.id)
        await self.refresh_profile()
        return self.user

    async def sign_up(self, email: str, password: str) -> None:
        await self._auth_request("signup", {"email": email, "password": password})

    async def sign_out(self) -> None:
        token = self.access_token
        self.user = None
        self.profile = None
        self.access_token = None
        self.refresh_token = None
        self.is_admin = False
        if token:
            try:
                await self._auth_request("logout", token=token)
            except AuthError as exc:
                logger.warning("Sign-out request failed: %s", exc)

    async def refresh_profile(self) -> bool:
        """Reload the advisory admin flag; on failure it falls back to False."""
        if not self.is_signed_in:
            self.is_admin = False
            return False
        try:
            data = await self.api.get("/api/profile")
        except ApiRequestError as exc:
            logger.warning("Error checking admin status: %s", exc)
            self.is_admin = False
            return False
        profile = data.get("profile")
        self.profile = UserProfile.model_validate(profile) if profile else None
        self.is_admin = bool(data.get("is_admin"))
        return self.is_admin


AuthMode = Literal["login", "signup"]


class AuthModal:
    """State of the email/password sign-in and sign-up dialog."""

    def __init__(self, session: AuthSession, default_mode: AuthMode = "login", close_delay: float = 2.0):
        self.session = session
        self.default_mode = default_mode
        self.close_delay = close_delay
        self.is_open = False
        self.mode: AuthMode = default_mode
        self.email = ""
        self.password = ""
        self.error = ""
        self.loading = False
        self.success = False

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def toggle_mode(self) -> None:
        self.mode = "signup" if self.mode == "login" else "login"
        self.error = ""

    @property
    def submit_label(self) -> str:
        if self.loading:
            return "Loading..."
        return "Sign In" if self.mode == "login" else "Create Account"

    async def submit(self) -> bool:
        self.error = ""
        self.loading = True
        self.success = False
        try:
            creds = AuthCredentials(email=self.email, password=self.password)
            if self.mode == "login":
                await self.session.sign_in(creds.email, creds.password)
                self.close()
            else:
                await self.session.sign_up(creds.email, creds.password)
                self.success = True
                asyncio.get_running_loop().call_later(self.close_delay, self.close)
            return True
        except ValidationError as exc:
            self.error = exc.errors()[0].get("msg", "Invalid email or password")
            return False
        except AuthError as exc:
            self.error = str(exc) or "An error occurred"
            return False
        finally:
            self.loading = False


class AuthButton:
    """Header button: sign-in prompt, or the user's email with a sign-out menu."""

    def __init__(self, session: AuthSession, modal: Optional[AuthModal] = None):
        self.session = session
        self.modal = modal or AuthModal(session)
        self.loading = False
        self.show_user_menu = False

    @property
    def label(self) -> str:
        if self.loading:
            return "Loading..."
        if self.session.user:
            return self.session.user.email or self.session.user.id
        return "Sign In"

    @property
    def show_admin_badge(self) -> bool:
        return self.session.user is not None and self.session.is_admin

    def click(self) -> None:
        if self.session.user:
            self.show_user_menu = not self.show_user_menu
        else:
            self.modal.open()

    async def sign_out(self) -> None:
        await self.session.sign_out()
        self.show_user_menu = False


__all__ = ["AuthError", "AuthSession", "AuthModal", "AuthButton"]
