"""
Enum definitions for the Postboard client state
"""

from enum import Enum

# Notification-related enums
class NotificationSeverity(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

# Default visibility for new posts, a form preference
class PostVisibility(str, Enum):
    """
    Visibility offered to the post form by default.

    Only affects client-side form defaults; the store has no visibility column.
    """
    PUBLIC = "public"
    PRIVATE = "private"
    DRAFT = "draft"
