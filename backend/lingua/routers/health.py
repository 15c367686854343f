from fastapi import APIRouter, Depends

from ..deps import get_storage
from ..storage import Storage

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health(storage: Storage = Depends(get_storage)):
	return {"status": "ok", "storage": storage.backend_name}
