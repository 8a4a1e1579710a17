"""Database layer - engine, base classes and column types."""

from commerce_kernel.db.base import Base, TrackedBase, UTCDateTime, UUIDString
from commerce_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    session_scope,
)

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UTCDateTime",
    "UUIDString",
]
