from __future__ import annotations
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from .. import schemas
from ..certificate import NotEligibleError, build_certificate
from ..deps import get_storage, parse_id, require_user
from ..storage import Storage, round_half_up


router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/{user_id}", response_model=schemas.UserProfile)
def get_user(user_id: str, storage: Storage = Depends(get_storage)):
	user = require_user(storage, parse_id(user_id, "user"))
	return schemas.UserProfile(
		**user.model_dump(exclude={"password"}),
		progress_percentage=storage.calculate_user_progress_percentage(user.id),
	)


@router.get("/{user_id}/progress", response_model=List[schemas.UserProgress])
def user_progress(user_id: str, storage: Storage = Depends(get_storage)):
	return storage.get_user_progress_by_user_id(parse_id(user_id, "user"))


@router.get("/{user_id}/lessons/{lesson_id}/progress", response_model=schemas.UserProgress)
def user_lesson_progress(user_id: str, lesson_id: str, storage: Storage = Depends(get_storage)):
	progress = storage.get_user_progress_by_lesson_id(parse_id(user_id, "user"), parse_id(lesson_id, "lesson"))
	if progress is None:
		raise HTTPException(status_code=404, detail="Progress not found")
	return progress


@router.get("/{user_id}/statistics", response_model=schemas.UserStatistics)
def user_statistics(user_id: str, storage: Storage = Depends(get_storage)):
	user = require_user(storage, parse_id(user_id, "user"))
	progress = storage.get_user_progress_by_user_id(user.id)
	lessons = {lesson.id: lesson for lesson in storage.get_lessons()}

	completed = [p for p in progress if p.completed]
	scored = [p.score for p in completed if p.score is not None]
	average_score = round_half_up(sum(scored) / len(scored)) if scored else 0
	vocabulary_count = sum(lessons[p.lesson_id].word_count for p in completed if p.lesson_id in lessons)

	return schemas.UserStatistics(
		completed_lessons=len(completed),
		total_lessons=len(lessons),
		progress_percentage=storage.calculate_user_progress_percentage(user.id),
		average_score=average_score,
		vocabulary_count=vocabulary_count,
		level=user.level,
		xp=user.xp,
	)


@router.get("/{user_id}/certificate", response_model=schemas.Certificate)
def user_certificate(user_id: str, storage: Storage = Depends(get_storage)):
	user = require_user(storage, parse_id(user_id, "user"))
	completed = sum(1 for p in storage.get_user_progress_by_user_id(user.id) if p.completed)
	try:
		return build_certificate(user, completed, len(storage.get_lessons()))
	except NotEligibleError as exc:
		raise HTTPException(status_code=404, detail=str(exc))


@router.get("/{user_id}/conversation-practice", response_model=List[schemas.UserConversationPractice])
def user_conversation_practice(user_id: str, storage: Storage = Depends(get_storage)):
	return storage.get_user_conversation_practice_by_user_id(parse_id(user_id, "user"))


@router.get("/{user_id}/conversations/{scenario_id}/practice", response_model=schemas.UserConversationPractice)
def user_scenario_practice(user_id: str, scenario_id: str, storage: Storage = Depends(get_storage)):
	practice = storage.get_user_conversation_practice_by_scenario_id(
		parse_id(user_id, "user"), parse_id(scenario_id, "scenario")
	)
	if practice is None:
		raise HTTPException(status_code=404, detail="Conversation practice not found")
	return practice
