"""
SchoolMap Backend - Password Hashing
====================================

What:  One-way bcrypt hashing and verification of user passwords.
How:   bcrypt with the cost factor from settings (default 10). Both calls are
       CPU-bound, so async callers run them through
       starlette.concurrency.run_in_threadpool.
"""

import bcrypt

from app.config import settings


def hash_password(plain: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def check_password(plain: str, hashed: str) -> bool:
    """False for a mismatch or for a stored value that is not a bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False
