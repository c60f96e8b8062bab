"""
Domain models for gpass.

These are immutable (frozen) dataclasses representing the core domain concepts.
"""

from gpass.models.identity import Identity
from gpass.models.message import Message
from gpass.models.repository import CommitInfo, Reference, RefKind

__all__ = [
    # Identity
    "Identity",
    # Crypto
    "Message",
    # Repository
    "RefKind",
    "Reference",
    "CommitInfo",
]
