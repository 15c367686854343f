from fastapi import HTTPException, Request

from .schemas import MAX_ID, User
from .storage import Storage


def get_storage(request: Request) -> Storage:
	return request.app.state.storage


def parse_id(raw: str, label: str) -> int:
	"""Path ids arrive as text so a bad id gets a 400 naming the entity."""
	try:
		value = int(raw)
	except (TypeError, ValueError):
		raise HTTPException(status_code=400, detail=f"Invalid {label} ID")
	if value < 1 or value > MAX_ID:
		raise HTTPException(status_code=400, detail=f"Invalid {label} ID")
	return value


def require_user(storage: Storage, user_id: int) -> User:
	user = storage.get_user(user_id)
	if user is None:
		raise HTTPException(status_code=404, detail="User not found")
	return user
