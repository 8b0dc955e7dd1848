# =============================================================================
# registry_core/config.py
# Application and Remote Store Configuration
# =============================================================================
"""
Configuration for the product registry.

Remote credentials are resolved from Streamlit secrets first:

    [supabase]
    url = "https://your-project.supabase.co"
    key = "your-anon-key"

and fall back to the environment (``SUPABASE_URL`` / ``SUPABASE_ANON_KEY``,
also accepting the ``NEXT_PUBLIC_`` prefixed names used by the web front end).
A missing configuration is not an error: the session simply runs in local mode.
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "product-registry"
DEFAULT_DB_PATH = Path(__file__).parent.parent / "local_data" / "registry.db"

URL_ENV_VARS = ("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL")
KEY_ENV_VARS = ("SUPABASE_ANON_KEY", "SUPABASE_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY")


@dataclass(frozen=True)
class RemoteConfig:
    """Credentials for the hosted backend."""
    url: str = ""
    key: str = ""

    def is_configured(self) -> bool:
        """True when both credentials are present and the url points at Supabase."""
        return bool(self.url and self.key and "supabase" in self.url)

    def describe(self) -> dict:
        return {
            "url": "present" if self.url else "missing",
            "key": "present" if self.key else "missing",
        }


@dataclass(frozen=True)
class AppSettings:
    """Session-wide settings that are not credentials."""
    namespace: str = DEFAULT_NAMESPACE
    db_path: Path = DEFAULT_DB_PATH
    banner_ms: int = 3000
    message_ms: int = 2000
    realtime_timeout_s: float = 10.0
    log_level: str = "INFO"
    remote: RemoteConfig = field(default_factory=RemoteConfig)


def _first_env(names, environ: Mapping[str, str]) -> str:
    for name in names:
        value = environ.get(name, "").strip()
        if value:
            return value
    return ""


def _secrets_section(secrets: Any) -> Optional[Mapping[str, Any]]:
    """Read the [supabase] section, tolerating a missing secrets file."""
    try:
        if secrets is not None and "supabase" in secrets:
            return secrets["supabase"]
    except Exception as e:
        # st.secrets raises when no secrets.toml exists
        logger.debug(f"Streamlit secrets unavailable: {e}")
    return None


def load_remote_config(
    secrets: Any = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RemoteConfig:
    """
    Resolve remote credentials.

    Args:
        secrets: Mapping shaped like ``st.secrets`` (optional)
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        RemoteConfig, possibly empty
    """
    environ = os.environ if environ is None else environ

    section = _secrets_section(secrets)
    if section is not None:
        url = str(section.get("url", "") or "").strip()
        key = str(section.get("key", "") or "").strip()
        if url and key:
            return RemoteConfig(url=url, key=key)

    return RemoteConfig(
        url=_first_env(URL_ENV_VARS, environ),
        key=_first_env(KEY_ENV_VARS, environ),
    )


def load_settings(
    secrets: Any = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppSettings:
    """Build AppSettings from secrets and environment."""
    environ = os.environ if environ is None else environ
    remote = load_remote_config(secrets, environ)

    db_path = environ.get("REGISTRY_DB_PATH")
    settings = AppSettings(
        namespace=environ.get("REGISTRY_NAMESPACE", DEFAULT_NAMESPACE) or DEFAULT_NAMESPACE,
        db_path=Path(db_path) if db_path else DEFAULT_DB_PATH,
        log_level=environ.get("REGISTRY_LOG_LEVEL", "INFO").upper(),
        remote=remote,
    )

    logger.info(f"Supabase configuration: {remote.describe()}")
    return settings
