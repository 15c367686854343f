from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from .settings import settings


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)


def _truncate(password: str) -> str:
	# bcrypt only looks at the first 72 bytes
	password_bytes = password.encode("utf-8")
	if len(password_bytes) > 72:
		password_bytes = password_bytes[:72]
	return password_bytes.decode("utf-8", errors="ignore")


def hash_password(password: str) -> str:
	return pwd_context.hash(_truncate(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
	try:
		return pwd_context.verify(_truncate(plain_password), hashed_password)
	except ValueError:
		# Stored value is not a recognised hash
		return False


def _resolve_expiry(expires_delta: Optional[timedelta]) -> datetime:
	delta = expires_delta
	if delta is None:
		minutes = settings.access_token_expire_minutes
		delta = timedelta(minutes=minutes) if minutes > 0 else timedelta(days=30)
	return datetime.now(timezone.utc) + delta


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
	to_encode = data.copy()
	to_encode.update({"exp": _resolve_expiry(expires_delta)})
	return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
	try:
		return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
	except JWTError:
		return None
