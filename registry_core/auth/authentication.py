# =============================================================================
# registry_core/auth/authentication.py
# Authentication over Supabase Auth, with a mock provider for local use
# =============================================================================
"""
Authentication for the product registry.

When Supabase is configured, sign-in goes through ``client.auth``. Without a
configuration a mock provider accepts a single development account so the
app stays usable offline:

    email:    admin@example.com
    password: admin123

The AuthSession object is created once per Streamlit session and handed to
the views explicitly.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from registry_core.config import RemoteConfig
from registry_core.data.supabase_client import is_stub_client
from registry_core.errors import AuthenticationError
from registry_core.services.base_service import BaseService, ServiceResult

MOCK_EMAIL = "admin@example.com"
MOCK_PASSWORD = "admin123"


@dataclass
class AuthUser:
    id: str
    email: str
    name: str
    role: str = "user"


def user_from_supabase(user: Any) -> Optional[AuthUser]:
    """Flatten a Supabase auth user into an AuthUser."""
    if user is None:
        return None
    email = getattr(user, "email", None) or ""
    metadata = getattr(user, "user_metadata", None) or {}
    return AuthUser(
        id=str(getattr(user, "id", "")),
        email=email,
        name=metadata.get("name") or (email.split("@")[0] if email else "") or "User",
        role=metadata.get("role") or "user",
    )


class AuthSession(BaseService):
    """
    Current identity for one app session.

    Usage:
        auth = AuthSession(client, settings.remote)
        result = auth.sign_in("admin@example.com", "admin123")
        if result.success:
            user = auth.current_user()
    """

    def __init__(self, client: Any, config: Optional[RemoteConfig] = None):
        super().__init__()
        self.client = client
        self.config = config or RemoteConfig()
        self._user: Optional[AuthUser] = None
        self._listeners: List[Callable[[Optional[AuthUser]], None]] = []

    @property
    def is_mock(self) -> bool:
        return not self.config.is_configured() or is_stub_client(self.client)

    def _set_user(self, user: Optional[AuthUser]) -> None:
        self._user = user
        for listener in list(self._listeners):
            try:
                listener(user)
            except Exception as e:
                self.logger.warning(f"Auth listener failed: {e}")

    # =========================================================================
    # SIGN IN / OUT
    # =========================================================================

    def sign_in(self, email: str, password: str) -> ServiceResult:
        email = (email or "").strip()
        if not email or not password:
            return ServiceResult.fail("E-mail en wachtwoord zijn verplicht", error_code="AUTH_001")

        if self.is_mock:
            self.logger.info("Supabase not configured - using mock authentication")
            if email == MOCK_EMAIL and password == MOCK_PASSWORD:
                user = AuthUser(id="mock-user-1", email=MOCK_EMAIL, name="Admin User", role="admin")
                self._set_user(user)
                return ServiceResult.ok(user, metadata={"mock": True})
            return ServiceResult.from_exception(
                AuthenticationError("Invalid credentials", email=email)
            )

        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
            user = user_from_supabase(getattr(response, "user", None))
            if user is None:
                raise AuthenticationError("Invalid credentials", email=email)
            self._set_user(user)
            self.logger.info(f"Signed in {email}")
            return ServiceResult.ok(user)
        except AuthenticationError as e:
            return ServiceResult.from_exception(e)
        except Exception as e:
            self.logger.warning(f"Sign-in failed for {email}: {e}")
            return ServiceResult.from_exception(AuthenticationError(str(e), email=email))

    def sign_up(self, email: str, password: str, name: Optional[str] = None) -> ServiceResult:
        email = (email or "").strip()
        if self.is_mock:
            return ServiceResult.fail("Supabase not configured", error_code="AUTH_001")

        try:
            response = self.client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": {"name": name or email.split("@")[0]}},
            })
            return ServiceResult.ok(user_from_supabase(getattr(response, "user", None)))
        except Exception as e:
            self.logger.warning(f"Sign-up failed for {email}: {e}")
            return ServiceResult.from_exception(AuthenticationError(str(e), email=email))

    def sign_out(self) -> ServiceResult:
        if not self.is_mock:
            try:
                self.client.auth.sign_out()
            except Exception as e:
                self.logger.warning(f"Sign-out failed: {e}")
                return ServiceResult.from_exception(e)
        self._set_user(None)
        return ServiceResult.ok()

    # =========================================================================
    # CURRENT USER
    # =========================================================================

    def current_user(self) -> Optional[AuthUser]:
        """The signed-in user, asking Supabase for its session when needed."""
        if self._user is not None or self.is_mock:
            return self._user
        try:
            session = self.client.auth.get_session()
        except Exception as e:
            self.logger.warning(f"Could not read auth session: {e}")
            return None
        if session is None or getattr(session, "user", None) is None:
            return None
        self._user = user_from_supabase(session.user)
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self.current_user() is not None

    def on_change(self, callback: Callable[[Optional[AuthUser]], None]) -> Callable[[], None]:
        """
        Register a listener for sign-in/sign-out.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(callback)
        remote_subscription = None

        if not self.is_mock:
            def _on_auth_event(event, session):
                user = user_from_supabase(getattr(session, "user", None)) if session else None
                self._user = user
                callback(user)

            try:
                remote_subscription = self.client.auth.on_auth_state_change(_on_auth_event)
            except Exception as e:
                self.logger.warning(f"Auth state subscription failed: {e}")

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)
            if remote_subscription is not None and hasattr(remote_subscription, "unsubscribe"):
                remote_subscription.unsubscribe()

        return remove
