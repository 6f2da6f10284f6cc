"""Router factories for the auth, user and match services."""

from matchup.services.auth import build_auth_hooks, create_auth_router
from matchup.services.match import build_match_hooks, create_match_router
from matchup.services.peers import UserDirectory
from matchup.services.user import build_picture_hooks, build_user_hooks, create_user_router

__all__ = [
    "UserDirectory",
    "build_auth_hooks",
    "build_match_hooks",
    "build_picture_hooks",
    "build_user_hooks",
    "create_auth_router",
    "create_match_router",
    "create_user_router",
]
