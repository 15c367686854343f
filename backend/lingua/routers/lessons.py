from __future__ import annotations
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from .. import schemas
from ..deps import get_storage, parse_id, require_user
from ..quiz import public_question, score_answers
from ..storage import Storage


router = APIRouter(prefix="/api/lessons", tags=["lessons"])


def _require_lesson(storage: Storage, raw_id: str) -> schemas.Lesson:
	lesson = storage.get_lesson(parse_id(raw_id, "lesson"))
	if lesson is None:
		raise HTTPException(status_code=404, detail="Lesson not found")
	return lesson


@router.get("", response_model=List[schemas.Lesson])
def list_lessons(storage: Storage = Depends(get_storage)):
	return storage.get_lessons()


@router.get("/{lesson_id}", response_model=schemas.Lesson)
def get_lesson(lesson_id: str, storage: Storage = Depends(get_storage)):
	return _require_lesson(storage, lesson_id)


@router.patch("/{lesson_id}/status", response_model=schemas.Lesson)
def update_lesson_status(
	lesson_id: str,
	req: schemas.LessonStatusUpdate,
	storage: Storage = Depends(get_storage),
):
	lesson = storage.update_lesson_status(parse_id(lesson_id, "lesson"), req.status)
	if lesson is None:
		raise HTTPException(status_code=404, detail="Lesson not found")
	return lesson


@router.get("/{lesson_id}/vocabulary", response_model=List[schemas.Vocabulary])
def lesson_vocabulary(lesson_id: str, storage: Storage = Depends(get_storage)):
	return storage.get_vocabulary_by_lesson_id(parse_id(lesson_id, "lesson"))


@router.get("/{lesson_id}/quiz", response_model=List[schemas.QuizQuestionWithOptions])
def lesson_quiz(lesson_id: str, storage: Storage = Depends(get_storage)):
	questions = storage.get_quiz_questions_by_lesson_id(parse_id(lesson_id, "lesson"))
	return [public_question(q, storage.get_quiz_options_by_question_id(q.id)) for q in questions]


@router.post("/{lesson_id}/quiz/submit", response_model=schemas.QuizResult)
def submit_quiz(
	lesson_id: str,
	req: schemas.QuizSubmission,
	storage: Storage = Depends(get_storage),
):
	lesson = _require_lesson(storage, lesson_id)
	require_user(storage, req.user_id)
	questions = storage.get_quiz_questions_by_lesson_id(lesson.id)
	if not questions:
		raise HTTPException(status_code=404, detail="Quiz not found")
	unknown = set(req.answers) - {q.id for q in questions}
	if unknown:
		raise HTTPException(status_code=400, detail=f"Unknown question ids: {sorted(unknown)}")
	score, results = score_answers(questions, req.answers)
	progress = storage.record_lesson_completion(req.user_id, lesson.id, score)
	return schemas.QuizResult(score=score, total=len(questions), results=results, progress=progress)


@router.post("/{lesson_id}/progress", response_model=schemas.UserProgress)
def submit_progress(
	lesson_id: str,
	req: schemas.ProgressSubmission,
	storage: Storage = Depends(get_storage),
):
	lesson = _require_lesson(storage, lesson_id)
	require_user(storage, req.user_id)
	return storage.record_lesson_completion(req.user_id, lesson.id, req.score)


@router.get("/{lesson_id}/conversations", response_model=List[schemas.ConversationScenario])
def lesson_conversations(lesson_id: str, storage: Storage = Depends(get_storage)):
	return storage.get_conversation_scenarios_by_lesson_id(parse_id(lesson_id, "lesson"))
