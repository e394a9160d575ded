from .base import BaseCollector, CollectionMetadata
from .models import OrganizationPosture, PostureSnapshot, SsoPosture, Team, UserAccount
from .posture import PostureCollector

__all__ = [
    "BaseCollector",
    "CollectionMetadata",
    "OrganizationPosture",
    "PostureCollector",
    "PostureSnapshot",
    "SsoPosture",
    "Team",
    "UserAccount",
]
