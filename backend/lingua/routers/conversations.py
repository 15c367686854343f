from __future__ import annotations
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from .. import schemas
from ..conversation import matches_accepted_response
from ..deps import get_storage, parse_id, require_user
from ..storage import Storage


# "/api/conversations/..." is the older spelling of the same routes
router = APIRouter(prefix="/api", tags=["conversations"])


def _require_scenario(storage: Storage, raw_id: str) -> schemas.ConversationScenario:
	scenario = storage.get_conversation_scenario(parse_id(raw_id, "scenario"))
	if scenario is None:
		raise HTTPException(status_code=404, detail="Conversation scenario not found")
	return scenario


@router.get("/conversation-scenarios", response_model=List[schemas.ConversationScenario])
def list_scenarios(storage: Storage = Depends(get_storage)):
	return storage.get_conversation_scenarios()


@router.get("/conversation-scenarios/{scenario_id}", response_model=schemas.ConversationScenario)
@router.get("/conversations/{scenario_id}", response_model=schemas.ConversationScenario, include_in_schema=False)
def get_scenario(scenario_id: str, storage: Storage = Depends(get_storage)):
	return _require_scenario(storage, scenario_id)


@router.get("/conversation-scenarios/{scenario_id}/dialogues", response_model=List[schemas.ConversationDialogue])
@router.get("/conversations/{scenario_id}/dialogues", response_model=List[schemas.ConversationDialogue], include_in_schema=False)
def get_dialogues(scenario_id: str, storage: Storage = Depends(get_storage)):
	return storage.get_conversation_dialogues_by_scenario_id(parse_id(scenario_id, "scenario"))


@router.post("/conversation-scenarios/{scenario_id}/practice", response_model=schemas.UserConversationPractice)
@router.post("/conversations/{scenario_id}/practice", response_model=schemas.UserConversationPractice, include_in_schema=False)
def submit_practice(
	scenario_id: str,
	req: schemas.PracticeSubmission,
	storage: Storage = Depends(get_storage),
):
	scenario = _require_scenario(storage, scenario_id)
	require_user(storage, req.user_id)
	return storage.record_conversation_practice(req.user_id, scenario.id, req.accuracy)


@router.post(
	"/conversation-scenarios/{scenario_id}/dialogues/{dialogue_id}/check",
	response_model=schemas.ResponseCheckResult,
)
def check_response(
	scenario_id: str,
	dialogue_id: str,
	req: schemas.ResponseCheck,
	storage: Storage = Depends(get_storage),
):
	scenario = _require_scenario(storage, scenario_id)
	wanted = parse_id(dialogue_id, "dialogue")
	turn = next((d for d in storage.get_conversation_dialogues_by_scenario_id(scenario.id) if d.id == wanted), None)
	if turn is None:
		raise HTTPException(status_code=404, detail="Dialogue not found")
	if turn.speaker_role != "user":
		raise HTTPException(status_code=400, detail="Only user turns can be checked")
	return schemas.ResponseCheckResult(
		correct=matches_accepted_response(req.response, turn.accepted_responses),
		expected=turn.portuguese,
	)
