from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
import jwt
from typing import Tuple
from brewco.core.config import settings

pwd_ctx = CryptContext(schemes=['bcrypt'], deprecated='auto', bcrypt__rounds=settings.BCRYPT_ROUNDS)

def hash_password(p: str) -> str: return pwd_ctx.hash(p)

def verify_password(p: str, h: str) -> bool:
    try:
        return pwd_ctx.verify(p, h)
    except ValueError:
        # unrecognised or malformed hash in the store
        return False

def now_utc() -> datetime: return datetime.now(timezone.utc).replace(tzinfo=None)

def create_access_token(claims: dict, expires: timedelta) -> Tuple[str, datetime]:
    iat = now_utc()
    exp = iat + expires
    payload = {**claims, 'sub': str(claims['id']), 'iat': iat, 'exp': exp, 'type': 'access'}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM), exp

def customer_token(user) -> str:
    token, _ = create_access_token(
        {'id': user.id, 'username': user.username, 'email': user.email, 'role': 'customer', 'kind': 'customer'},
        timedelta(days=settings.ACCESS_TOKEN_EXPIRES_DAYS),
    )
    return token

def admin_token(admin) -> str:
    token, _ = create_access_token(
        {'id': admin.id, 'username': admin.username, 'email': admin.email or '', 'role': admin.role, 'kind': 'admin'},
        timedelta(hours=settings.ADMIN_TOKEN_EXPIRES_HOURS),
    )
    return token

def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
