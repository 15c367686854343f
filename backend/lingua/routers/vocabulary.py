from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from .. import schemas
from ..deps import get_storage
from ..search import search_vocabulary
from ..storage import Storage


router = APIRouter(prefix="/api/vocabulary", tags=["vocabulary"])


@router.get("/search", response_model=List[schemas.VocabularySearchResult])
def search(term: Optional[str] = None, storage: Storage = Depends(get_storage)):
	if not term or not term.strip():
		raise HTTPException(status_code=400, detail="Search term is required")
	return search_vocabulary(storage, term)
