# apps/common/enums.py
"""
Centralized constants/enums for the Video Platform.
Single source of truth for frontend and backend.

These values are exposed via GET /api/enums/ endpoint.
"""

from apps.accounts.models import AuthProvider
from apps.engagement.models import LikeKind
from apps.videos.models import VideoPrivacy, VideoStatus

from .pagination import DEFAULT_LIMIT, MAX_LIMIT
from .validators import PASSWORD_MIN_LENGTH, USERNAME_MAX_LENGTH, USERNAME_MIN_LENGTH


def choices(enum):
    return [{"value": value, "label": label} for value, label in enum.choices]


# ========== ACCOUNT RULES ==========
USERNAME_RULES = {
    "min_length": USERNAME_MIN_LENGTH,
    "max_length": USERNAME_MAX_LENGTH,
    "pattern": "^[a-z0-9_]+$",
}

PASSWORD_RULES = {
    "min_length": PASSWORD_MIN_LENGTH,
}

PAGINATION = {
    "default_limit": DEFAULT_LIMIT,
    "max_limit": MAX_LIMIT,
}


def get_all_enums():
    """
    Returns all enums as a single dictionary.
    This is what the /api/enums/ endpoint returns.
    """
    return {
        "auth_providers": choices(AuthProvider),
        "like_kinds": choices(LikeKind),
        "video_privacy": choices(VideoPrivacy),
        "video_status": choices(VideoStatus),
        "username": USERNAME_RULES,
        "password": PASSWORD_RULES,
        "pagination": PAGINATION,
    }
