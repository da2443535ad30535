"""Sessions module."""

from .store import ISessionStore, SessionStore, SessionTransaction, utc_now

__all__ = ["ISessionStore", "SessionStore", "SessionTransaction", "utc_now"]
