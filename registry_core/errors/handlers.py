# =============================================================================
# registry_core/errors/handlers.py
# Error Handling Utilities for the Product Registry
# =============================================================================

from __future__ import annotations
import traceback
from typing import Optional, Callable, TypeVar
import streamlit as st

from registry_core.logging import get_logger
from .exceptions import RegistryError

logger = get_logger(__name__)

T = TypeVar("T")


def handle_error(
    error: Exception,
    show_user_message: bool = True,
    log_error: bool = True,
    user_message: Optional[str] = None,
) -> None:
    """
    Centralized error handling function.

    Args:
        error: The exception to handle
        show_user_message: Whether to display error to user via st.error
        log_error: Whether to log the error
        user_message: Custom message to show user (uses error message if None)
    """
    if isinstance(error, RegistryError):
        message = user_message or error.message
        code = error.code
        details = error.details
        recoverable = error.recoverable
    else:
        message = user_message or str(error)
        code = "UNKNOWN"
        details = {"traceback": traceback.format_exc()}
        recoverable = True

    if log_error:
        logger.error(
            f"[{code}] {message}",
            extra={"details": details},
            exc_info=True,
        )

    if show_user_message:
        if recoverable:
            st.error(f"Fout: {message}")
        else:
            st.error(f"Kritieke fout: {message}. Neem contact op met de beheerder.")

        if details and st.session_state.get("debug_mode", False):
            with st.expander("Foutdetails", expanded=False):
                st.json(details)


def safe_execute(
    func: Callable[..., T],
    *args,
    default: Optional[T] = None,
    error_message: Optional[str] = None,
    reraise: bool = False,
    show_user_message: bool = True,
    **kwargs,
) -> Optional[T]:
    """
    Execute a function with automatic error handling.

    Returns the function result, or ``default`` when it raised.

    Usage:
        rows = safe_execute(
            client.table("users").select("*").execute,
            default=None,
            error_message="Gebruikers konden niet worden geladen",
        )
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        handle_error(e, show_user_message=show_user_message, user_message=error_message)
        if reraise:
            raise
        return default


class ErrorContext:
    """
    Context manager for error handling with automatic logging and user feedback.

    Usage:
        with ErrorContext("Signing out"):
            auth_session.sign_out()
    """

    def __init__(
        self,
        operation: str,
        recoverable: bool = True,
        show_user_message: bool = True,
    ):
        self.operation = operation
        self.recoverable = recoverable
        self.show_user_message = show_user_message

    def __enter__(self) -> ErrorContext:
        logger.info(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        # Streamlit's rerun/stop signals are BaseExceptions and must pass through
        if exc_type is not None and issubclass(exc_type, Exception):
            if isinstance(exc_val, RegistryError):
                handle_error(exc_val, show_user_message=self.show_user_message)
            else:
                handle_error(
                    exc_val,
                    show_user_message=self.show_user_message,
                    user_message=f"Fout tijdens: {self.operation}",
                )
            return self.recoverable

        if exc_type is None:
            logger.info(f"Completed: {self.operation}")
        return False
