"""
SessionStoreLib - Session snapshot persistence

This module stores whole-session snapshots (canvas transform and layer
stack) with bounded, oldest-first retention.
"""

from RC_Libs.SessionStoreLib.session_store import (
    SessionRecord,
    SessionStore,
    validate_state,
)

__all__ = [
    "SessionRecord",
    "SessionStore",
    "validate_state",
]
