from .session import init_state, get_registry, get_form, get_auth, reset_registry

__all__ = ["init_state", "get_registry", "get_form", "get_auth", "reset_registry"]
