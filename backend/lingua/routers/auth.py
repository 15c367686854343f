from typing import Optional

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm, OAuth2PasswordBearer
from pydantic import BaseModel, Field, field_validator
import logging

from .. import schemas
from ..deps import get_storage
from ..security import create_access_token, decode_access_token, hash_password, verify_password
from ..storage import Storage

router = APIRouter(prefix="/api", tags=["auth"])

logger = logging.getLogger(__name__)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/token")


class Token(BaseModel):
	access_token: str
	token_type: str = "bearer"


class AuthResponse(Token):
	user: schemas.UserPublic


class LoginRequest(BaseModel):
	username: str
	password: str


class RegisterRequest(schemas.CamelModel):
	username: str = Field(min_length=3, max_length=128)
	password: str = Field(min_length=6)
	display_name: str = Field(min_length=1, max_length=128)

	@field_validator("username", "display_name", mode="before")
	@classmethod
	def _strip(cls, value):
		# Trimmed before the length checks run
		return value.strip() if isinstance(value, str) else value


def _public(user: schemas.User) -> schemas.UserPublic:
	return schemas.UserPublic(**user.model_dump(exclude={"password"}))


def _issue_token(user: schemas.User) -> str:
	return create_access_token({"sub": user.username, "uid": user.id})


def authenticate_user(storage: Storage, username: str, password: str) -> Optional[schemas.User]:
	user = storage.get_user_by_username(username)
	if user and verify_password(password, user.password):
		return user
	return None


def get_current_user(token: str = Depends(oauth2_scheme), storage: Storage = Depends(get_storage)) -> schemas.User:
	credentials_exception = HTTPException(
		status_code=401,
		detail="Could not validate credentials",
		headers={"WWW-Authenticate": "Bearer"},
	)
	payload = decode_access_token(token)
	if payload is None:
		raise credentials_exception
	username: Optional[str] = payload.get("sub")
	if username is None:
		raise credentials_exception
	user = storage.get_user_by_username(username)
	if user is None:
		raise credentials_exception
	return user


@router.post("/register", status_code=201, response_model=AuthResponse)
def register(req: RegisterRequest, storage: Storage = Depends(get_storage)):
	if storage.get_user_by_username(req.username):
		raise HTTPException(status_code=409, detail="Username already exists")
	user = storage.create_user(
		schemas.UserCreate(
			username=req.username,
			password=hash_password(req.password),
			display_name=req.display_name,
		)
	)
	logger.info("Registered user %s (id %s)", user.username, user.id)
	return AuthResponse(access_token=_issue_token(user), user=_public(user))


@router.post("/login", response_model=AuthResponse)
def login(req: LoginRequest, storage: Storage = Depends(get_storage)):
	user = authenticate_user(storage, req.username, req.password)
	if not user:
		raise HTTPException(status_code=401, detail="Incorrect username or password")
	return AuthResponse(access_token=_issue_token(user), user=_public(user))


@router.post("/token", response_model=Token)
def token(form_data: OAuth2PasswordRequestForm = Depends(), storage: Storage = Depends(get_storage)):
	user = authenticate_user(storage, form_data.username, form_data.password)
	if not user:
		raise HTTPException(status_code=401, detail="Incorrect username or password")
	return Token(access_token=_issue_token(user))


@router.get("/user", response_model=schemas.UserPublic)
def me(user: schemas.User = Depends(get_current_user)):
	return _public(user)
