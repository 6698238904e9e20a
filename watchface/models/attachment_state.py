# watchface/models/attachment_state.py
from __future__ import annotations
from enum import Enum


class AttachmentState(str, Enum):
    """Lifecycle of a Watch relative to its Host window."""
    DETACHED = "detached"
    ATTACHED = "attached"
