from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid

import bcrypt
from jose import JWTError, jwt
from blog.core.config import settings

ALGORITHM = "HS256"


def hash_password(password: str) -> bytes:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt())


def verify_password(password: str, password_hash: bytes) -> bool:
    # checkpw compares in constant time
    try:
        return bcrypt.checkpw(password.encode(), bytes(password_hash))
    except ValueError:
        # malformed stored hash
        return False


def create_access_token(user_id: uuid.UUID, username: str) -> str:
    payload = {
        "sub": str(user_id),
        "username": username,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_EXPIRE_MIN),
        "type": "access"
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)

def verify_token(token: str) -> Optional[dict]:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        return None

def decode_token(token: str) -> Optional[uuid.UUID]:
    payload = verify_token(token)
    if payload is None or payload.get("type") != "access":
        return None
    try:
        return uuid.UUID(payload.get("sub", ""))
    except ValueError:
        return None
