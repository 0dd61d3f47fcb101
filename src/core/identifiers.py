"""Unique id generation for content records."""

from __future__ import annotations

import uuid


def uuid4_identifier() -> str:
    """Return a random collision-free content id."""
    return str(uuid.uuid4())
