from passlib.context import CryptContext
from jose import JWTError, jwt
from datetime import datetime, timedelta
from typing import Optional
from devgad.core.config import settings

# Create hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "purpose": to_encode.get("purpose", "access")})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_token(token: str, purpose: str = "access") -> Optional[dict]:
    """Decode one of our own signed tokens; None when invalid, expired or minted for another purpose."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("purpose") != purpose:
        return None
    return payload

def create_action_token(purpose: str, subject: str, expires_delta: timedelta) -> str:
    """Short-lived single-purpose token embedded in emailed links."""
    return create_access_token({"sub": subject, "purpose": purpose}, expires_delta=expires_delta)

def decode_federated_token(id_token: str) -> Optional[dict]:
    if not settings.FEDERATED_AUTH_SECRET:
        return None
    options = {"verify_aud": settings.FEDERATED_AUTH_AUDIENCE is not None}
    try:
        return jwt.decode(
            id_token,
            settings.FEDERATED_AUTH_SECRET,
            algorithms=[settings.FEDERATED_AUTH_ALGORITHM],
            audience=settings.FEDERATED_AUTH_AUDIENCE,
            options=options,
        )
    except JWTError:
        return None
