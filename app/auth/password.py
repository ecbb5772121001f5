"""
Password Hashing and Verification
Uses bcrypt (via passlib) for account passwords
"""

from passlib.context import CryptContext
import secrets
import string

MIN_PASSWORD_LENGTH = 6

# Password context for hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Hash a plain password

    Args:
        password: Plain text password

    Returns:
        Hashed password for users.password_hash
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a login attempt against a stored hash

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password from database (may be empty)

    Returns:
        True if password matches, False otherwise (including an unreadable hash)
    """
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def is_acceptable_password(password: str) -> bool:
    return password is not None and len(password) >= MIN_PASSWORD_LENGTH


def generate_random_password(length: int = 12) -> str:
    """
    Generate a secure random password for provisioning scripts

    Args:
        length: Length of password (default 12)

    Returns:
        Random letters+digits password
    """
    characters = string.ascii_letters + string.digits
    return ''.join(secrets.choice(characters) for _ in range(length))
