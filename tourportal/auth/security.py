import time
import jwt
import logging
from typing import Optional
import bcrypt

from tourportal.core.config import BCRYPT_ROUNDS, JWT_ALGO, JWT_EXPIRE_MIN, SECRET_KEY

logger = logging.getLogger("tourportal.auth")


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.
    """
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a password against its hash.
    Accounts provisioned without a password never verify.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError as e:
        logger.warning("Password verification failed: %s", e)
        return False


def create_token(payload: dict) -> str:
    now = int(time.time())
    exp = now + JWT_EXPIRE_MIN * 60
    to_encode = {**payload, "iat": now, "exp": exp}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGO)


def verify_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGO])
    except jwt.PyJWTError as e:
        logger.warning("Token verification failed: %s", e)
        return None
