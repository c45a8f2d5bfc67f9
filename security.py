from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from config import Settings
from errors import Unauthorized

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/login", auto_error=False)

# Passwords

@lru_cache()
def get_crypt_context(rounds: int = 10) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def get_password_hash(password: str, rounds: int = 10) -> str:
    return get_crypt_context(rounds).hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return get_crypt_context().verify(plain_password, hashed_password)
    except ValueError:
        # stored value is not a recognizable hash
        return False

# Tokens

def create_access_token(user_id: str, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta if expires_delta is not None else timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {"sub": str(user_id), "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: Settings) -> str:
    """Return the user id bound to ``token`` or raise Unauthorized."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        raise Unauthorized("Token has expired")
    except JWTError:
        raise Unauthorized("Token is not valid")
    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Token is not valid")
    return user_id


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user_id(token: Optional[str] = Depends(oauth2_scheme),
                        settings: Settings = Depends(get_app_settings)) -> str:
    if not token:
        raise Unauthorized("No token, authorization denied")
    return decode_access_token(token, settings)
