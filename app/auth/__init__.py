"""
Authentication Module
Password hashing, JWT tokens and the identity gate
"""

from app.auth.password import (
    hash_password,
    verify_password,
    is_acceptable_password,
    generate_random_password,
    MIN_PASSWORD_LENGTH,
)
from app.auth.dependencies import (
    ROLE_ADMIN,
    ROLE_CLUB_LEAD,
    ROLE_STUDENT,
    create_access_token,
    create_user_token,
    decode_access_token,
    has_role,
    get_current_user,
    get_optional_user,
    require_roles,
    get_admin,
    get_club_lead_or_admin,
)

__all__ = [
    "hash_password",
    "verify_password",
    "is_acceptable_password",
    "generate_random_password",
    "MIN_PASSWORD_LENGTH",
    "ROLE_ADMIN",
    "ROLE_CLUB_LEAD",
    "ROLE_STUDENT",
    "create_access_token",
    "create_user_token",
    "decode_access_token",
    "has_role",
    "get_current_user",
    "get_optional_user",
    "require_roles",
    "get_admin",
    "get_club_lead_or_admin",
]
