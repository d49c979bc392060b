"""Password hashing and JWT token utilities"""
from datetime import datetime, timedelta, timezone
from jose import jwt as jose_jwt
from passlib.context import CryptContext
from .config import settings
import logging

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.password_hash_rounds,
)


class TokenExpiredError(ValueError):
    """Raised when a structurally valid token is past its expiry"""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


def generate_jwt_token(user_id: str, email: str, role: str) -> str:
    """Generate JWT token for authenticated account"""
    now = datetime.now(timezone.utc)
    payload = {
        'sub': user_id,
        'email': email,
        'role': role,
        'exp': now + timedelta(minutes=settings.jwt_expiry_minutes),
        'iat': now,
    }
    return jose_jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_jwt_token(token: str) -> dict:
    """Verify and decode JWT token"""
    try:
        payload = jose_jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jose_jwt.ExpiredSignatureError:
        logger.warning("JWT verification failed: token expired")
        raise TokenExpiredError('Token has expired')
    except jose_jwt.JWTError as e:
        logger.warning("JWT verification failed: %s", str(e))
        raise ValueError(f'Invalid token: {str(e)}')

    if not payload.get('sub'):
        raise ValueError('Invalid token: missing subject')
    return payload
