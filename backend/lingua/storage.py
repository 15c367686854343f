"""
Storage facade.

``Storage`` is the single persistence interface the API talks to. Two
implementations satisfy it: ``MemStorage`` keeps everything in dictionaries
for tests and demos, ``DatabaseStorage`` goes through SQLAlchemy. Both accept
and return the pydantic models from ``schemas`` so routes are storage-agnostic.
"""
from __future__ import annotations
import json
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from . import models
from . import schemas
from .db import Base, make_session_factory

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _now() -> datetime:
	return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
	# Python's round() is banker's rounding; percentages round .5 upwards
	return int(value + 0.5)


def upsert(existing: Optional[T], create: Callable[[], T], update: Callable[[T], Optional[T]]) -> T:
	"""Update ``existing`` in place when present, otherwise create a new record."""
	if existing is not None:
		updated = update(existing)
		if updated is not None:
			return updated
	return create()


class Storage(ABC):
	backend_name = "abstract"

	def prepare(self) -> None:
		"""Create whatever the backend needs before first use."""

	# ---- Users ----
	@abstractmethod
	def get_user(self, user_id: int) -> Optional[schemas.User]: ...

	@abstractmethod
	def get_user_by_username(self, username: str) -> Optional[schemas.User]: ...

	@abstractmethod
	def create_user(self, user: schemas.UserCreate) -> schemas.User: ...

	# ---- Lessons ----
	@abstractmethod
	def get_lessons(self) -> List[schemas.Lesson]: ...

	@abstractmethod
	def get_lesson(self, lesson_id: int) -> Optional[schemas.Lesson]: ...

	@abstractmethod
	def create_lesson(self, lesson: schemas.LessonCreate) -> schemas.Lesson: ...

	@abstractmethod
	def update_lesson_status(self, lesson_id: int, status: str) -> Optional[schemas.Lesson]: ...

	# ---- Vocabulary ----
	@abstractmethod
	def get_vocabulary_by_lesson_id(self, lesson_id: int) -> List[schemas.Vocabulary]: ...

	@abstractmethod
	def get_vocabulary(self, vocabulary_id: int) -> Optional[schemas.Vocabulary]: ...

	@abstractmethod
	def create_vocabulary(self, vocabulary: schemas.VocabularyCreate) -> schemas.Vocabulary: ...

	# ---- Quiz ----
	@abstractmethod
	def get_quiz_questions_by_lesson_id(self, lesson_id: int) -> List[schemas.QuizQuestion]: ...

	@abstractmethod
	def get_quiz_question(self, question_id: int) -> Optional[schemas.QuizQuestion]: ...

	@abstractmethod
	def create_quiz_question(self, question: schemas.QuizQuestionCreate) -> schemas.QuizQuestion: ...

	@abstractmethod
	def get_quiz_options_by_question_id(self, question_id: int) -> List[schemas.QuizOption]: ...

	@abstractmethod
	def create_quiz_option(self, option: schemas.QuizOptionCreate) -> schemas.QuizOption: ...

	# ---- Progress ----
	@abstractmethod
	def get_user_progress_by_user_id(self, user_id: int) -> List[schemas.UserProgress]: ...

	@abstractmethod
	def get_user_progress_by_lesson_id(self, user_id: int, lesson_id: int) -> Optional[schemas.UserProgress]: ...

	@abstractmethod
	def create_user_progress(self, progress: schemas.UserProgressCreate) -> schemas.UserProgress: ...

	@abstractmethod
	def update_user_progress(self, progress_id: int, changes: Dict[str, Any]) -> Optional[schemas.UserProgress]: ...

	# ---- Conversations ----
	@abstractmethod
	def get_conversation_scenarios(self) -> List[schemas.ConversationScenario]: ...

	@abstractmethod
	def get_conversation_scenarios_by_lesson_id(self, lesson_id: int) -> List[schemas.ConversationScenario]: ...

	@abstractmethod
	def get_conversation_scenario(self, scenario_id: int) -> Optional[schemas.ConversationScenario]: ...

	@abstractmethod
	def create_conversation_scenario(self, scenario: schemas.ConversationScenarioCreate) -> schemas.ConversationScenario: ...

	@abstractmethod
	def get_conversation_dialogues_by_scenario_id(self, scenario_id: int) -> List[schemas.ConversationDialogue]: ...

	@abstractmethod
	def create_conversation_dialogue(self, dialogue: schemas.ConversationDialogueCreate) -> schemas.ConversationDialogue: ...

	# ---- Practice ----
	@abstractmethod
	def get_user_conversation_practice_by_user_id(self, user_id: int) -> List[schemas.UserConversationPractice]: ...

	@abstractmethod
	def get_user_conversation_practice_by_scenario_id(self, user_id: int, scenario_id: int) -> Optional[schemas.UserConversationPractice]: ...

	@abstractmethod
	def create_user_conversation_practice(self, practice: schemas.UserConversationPracticeCreate) -> schemas.UserConversationPractice: ...

	@abstractmethod
	def update_user_conversation_practice(self, practice_id: int, changes: Dict[str, Any]) -> Optional[schemas.UserConversationPractice]: ...

	# ---- Shared behaviour ----

	def is_empty(self) -> bool:
		return not self.get_lessons()

	def calculate_user_progress_percentage(self, user_id: int) -> int:
		total_lessons = len(self.get_lessons())
		if total_lessons == 0:
			return 0
		completed = sum(1 for p in self.get_user_progress_by_user_id(user_id) if p.completed)
		return round_half_up(completed / total_lessons * 100)

	def upsert_user_progress(self, user_id: int, lesson_id: int, **values: Any) -> schemas.UserProgress:
		return upsert(
			self.get_user_progress_by_lesson_id(user_id, lesson_id),
			lambda: self.create_user_progress(
				schemas.UserProgressCreate(user_id=user_id, lesson_id=lesson_id, **values)
			),
			lambda row: self.update_user_progress(row.id, values),
		)

	def upsert_user_conversation_practice(self, user_id: int, scenario_id: int, **values: Any) -> schemas.UserConversationPractice:
		return upsert(
			self.get_user_conversation_practice_by_scenario_id(user_id, scenario_id),
			lambda: self.create_user_conversation_practice(
				schemas.UserConversationPracticeCreate(user_id=user_id, scenario_id=scenario_id, **values)
			),
			lambda row: self.update_user_conversation_practice(row.id, values),
		)

	def record_lesson_completion(self, user_id: int, lesson_id: int, score: int) -> schemas.UserProgress:
		progress = self.upsert_user_progress(
			user_id, lesson_id, completed=True, score=score, completed_at=_now()
		)
		self.update_lesson_status(lesson_id, "completed")
		logger.info("User %s completed lesson %s with score %s", user_id, lesson_id, score)
		return progress

	def record_conversation_practice(self, user_id: int, scenario_id: int, accuracy: int) -> schemas.UserConversationPractice:
		practice = self.upsert_user_conversation_practice(
			user_id, scenario_id, completed=True, accuracy=accuracy, completed_at=_now()
		)
		logger.info("User %s practiced scenario %s with accuracy %s", user_id, scenario_id, accuracy)
		return practice


class MemStorage(Storage):
	"""Dictionary-backed storage. Shared by every request in the process, no locking."""

	backend_name = "memory"

	def __init__(self) -> None:
		self._tables: Dict[str, Dict[int, Any]] = {}
		self._next_ids: Dict[str, int] = {}

	def _table(self, name: str) -> Dict[int, Any]:
		return self._tables.setdefault(name, {})

	def _insert(self, name: str, model: type, data: schemas.CamelModel) -> Any:
		new_id = self._next_ids.get(name, 1)
		self._next_ids[name] = new_id + 1
		row = model(id=new_id, **data.model_dump())
		self._table(name)[new_id] = row
		return row

	def _update(self, name: str, row_id: int, changes: Dict[str, Any]) -> Any:
		row = self._table(name).get(row_id)
		if row is None:
			return None
		updated = row.model_copy(update=changes)
		self._table(name)[row_id] = updated
		return updated

	def _where(self, name: str, **criteria: Any) -> List[Any]:
		return [
			row for row in self._table(name).values()
			if all(getattr(row, key) == value for key, value in criteria.items())
		]

	# Users
	def get_user(self, user_id: int) -> Optional[schemas.User]:
		return self._table("users").get(user_id)

	def get_user_by_username(self, username: str) -> Optional[schemas.User]:
		return next(iter(self._where("users", username=username)), None)

	def create_user(self, user: schemas.UserCreate) -> schemas.User:
		return self._insert("users", schemas.User, user)

	# Lessons
	def get_lessons(self) -> List[schemas.Lesson]:
		return sorted(self._table("lessons").values(), key=lambda lesson: lesson.order)

	def get_lesson(self, lesson_id: int) -> Optional[schemas.Lesson]:
		return self._table("lessons").get(lesson_id)

	def create_lesson(self, lesson: schemas.LessonCreate) -> schemas.Lesson:
		return self._insert("lessons", schemas.Lesson, lesson)

	def update_lesson_status(self, lesson_id: int, status: str) -> Optional[schemas.Lesson]:
		return self._update("lessons", lesson_id, {"status": status})

	# Vocabulary
	def get_vocabulary_by_lesson_id(self, lesson_id: int) -> List[schemas.Vocabulary]:
		return self._where("vocabulary", lesson_id=lesson_id)

	def get_vocabulary(self, vocabulary_id: int) -> Optional[schemas.Vocabulary]:
		return self._table("vocabulary").get(vocabulary_id)

	def create_vocabulary(self, vocabulary: schemas.VocabularyCreate) -> schemas.Vocabulary:
		return self._insert("vocabulary", schemas.Vocabulary, vocabulary)

	# Quiz
	def get_quiz_questions_by_lesson_id(self, lesson_id: int) -> List[schemas.QuizQuestion]:
		return self._where("quiz_questions", lesson_id=lesson_id)

	def get_quiz_question(self, question_id: int) -> Optional[schemas.QuizQuestion]:
		return self._table("quiz_questions").get(question_id)

	def create_quiz_question(self, question: schemas.QuizQuestionCreate) -> schemas.QuizQuestion:
		return self._insert("quiz_questions", schemas.QuizQuestion, question)

	def get_quiz_options_by_question_id(self, question_id: int) -> List[schemas.QuizOption]:
		return self._where("quiz_options", question_id=question_id)

	def create_quiz_option(self, option: schemas.QuizOptionCreate) -> schemas.QuizOption:
		return self._insert("quiz_options", schemas.QuizOption, option)

	# Progress
	def get_user_progress_by_user_id(self, user_id: int) -> List[schemas.UserProgress]:
		return self._where("user_progress", user_id=user_id)

	def get_user_progress_by_lesson_id(self, user_id: int, lesson_id: int) -> Optional[schemas.UserProgress]:
		return next(iter(self._where("user_progress", user_id=user_id, lesson_id=lesson_id)), None)

	def create_user_progress(self, progress: schemas.UserProgressCreate) -> schemas.UserProgress:
		return self._insert("user_progress", schemas.UserProgress, progress)

	def update_user_progress(self, progress_id: int, changes: Dict[str, Any]) -> Optional[schemas.UserProgress]:
		return self._update("user_progress", progress_id, changes)

	# Conversations
	def get_conversation_scenarios(self) -> List[schemas.ConversationScenario]:
		return list(self._table("conversation_scenarios").values())

	def get_conversation_scenarios_by_lesson_id(self, lesson_id: int) -> List[schemas.ConversationScenario]:
		return self._where("conversation_scenarios", lesson_id=lesson_id)

	def get_conversation_scenario(self, scenario_id: int) -> Optional[schemas.ConversationScenario]:
		return self._table("conversation_scenarios").get(scenario_id)

	def create_conversation_scenario(self, scenario: schemas.ConversationScenarioCreate) -> schemas.ConversationScenario:
		return self._insert("conversation_scenarios", schemas.ConversationScenario, scenario)

	def get_conversation_dialogues_by_scenario_id(self, scenario_id: int) -> List[schemas.ConversationDialogue]:
		return sorted(self._where("conversation_dialogues", scenario_id=scenario_id), key=lambda d: d.order)

	def create_conversation_dialogue(self, dialogue: schemas.ConversationDialogueCreate) -> schemas.ConversationDialogue:
		return self._insert("conversation_dialogues", schemas.ConversationDialogue, dialogue)

	# Practice
	def get_user_conversation_practice_by_user_id(self, user_id: int) -> List[schemas.UserConversationPractice]:
		return self._where("user_conversation_practice", user_id=user_id)

	def get_user_conversation_practice_by_scenario_id(self, user_id: int, scenario_id: int) -> Optional[schemas.UserConversationPractice]:
		return next(iter(self._where("user_conversation_practice", user_id=user_id, scenario_id=scenario_id)), None)

	def create_user_conversation_practice(self, practice: schemas.UserConversationPracticeCreate) -> schemas.UserConversationPractice:
		return self._insert("user_conversation_practice", schemas.UserConversationPractice, practice)

	def update_user_conversation_practice(self, practice_id: int, changes: Dict[str, Any]) -> Optional[schemas.UserConversationPractice]:
		return self._update("user_conversation_practice", practice_id, changes)


def _dialogue_columns(dialogue: schemas.ConversationDialogueCreate) -> Dict[str, Any]:
	data = dialogue.model_dump()
	data["hints"] = json.dumps(data["hints"], ensure_ascii=False)
	data["accepted_responses"] = json.dumps(data["accepted_responses"], ensure_ascii=False)
	return data


class DatabaseStorage(Storage):
	"""SQLAlchemy-backed storage. One short-lived session per call."""

	backend_name = "database"

	def __init__(self, bind: Engine) -> None:
		self.engine = bind
		self._session_factory = make_session_factory(bind)

	def prepare(self) -> None:
		Base.metadata.create_all(bind=self.engine)
		logger.info("Database schema ready on %s", self.engine.url.render_as_string(hide_password=True))

	@contextmanager
	def session(self) -> Iterator[Session]:
		db = self._session_factory()
		try:
			yield db
		finally:
			db.close()

	def _get(self, model: type, schema: type, row_id: int) -> Any:
		with self.session() as db:
			row = db.get(model, row_id)
			return schema.model_validate(row) if row is not None else None

	def _list(self, schema: type, statement: Any) -> List[Any]:
		with self.session() as db:
			return [schema.model_validate(row) for row in db.scalars(statement).all()]

	def _first(self, schema: type, statement: Any) -> Any:
		with self.session() as db:
			row = db.scalars(statement).first()
			return schema.model_validate(row) if row is not None else None

	def _insert(self, model: type, schema: type, data: Dict[str, Any]) -> Any:
		with self.session() as db:
			row = model(**data)
			db.add(row)
			db.commit()
			return schema.model_validate(row)

	def _update(self, model: type, schema: type, row_id: int, changes: Dict[str, Any]) -> Any:
		with self.session() as db:
			row = db.get(model, row_id)
			if row is None:
				return None
			for key, value in changes.items():
				setattr(row, key, value)
			db.commit()
			return schema.model_validate(row)

	# Users
	def get_user(self, user_id: int) -> Optional[schemas.User]:
		return self._get(models.User, schemas.User, user_id)

	def get_user_by_username(self, username: str) -> Optional[schemas.User]:
		return self._first(schemas.User, select(models.User).where(models.User.username == username))

	def create_user(self, user: schemas.UserCreate) -> schemas.User:
		return self._insert(models.User, schemas.User, user.model_dump())

	# Lessons
	def get_lessons(self) -> List[schemas.Lesson]:
		return self._list(schemas.Lesson, select(models.Lesson).order_by(models.Lesson.order))

	def get_lesson(self, lesson_id: int) -> Optional[schemas.Lesson]:
		return self._get(models.Lesson, schemas.Lesson, lesson_id)

	def create_lesson(self, lesson: schemas.LessonCreate) -> schemas.Lesson:
		return self._insert(models.Lesson, schemas.Lesson, lesson.model_dump())

	def update_lesson_status(self, lesson_id: int, status: str) -> Optional[schemas.Lesson]:
		return self._update(models.Lesson, schemas.Lesson, lesson_id, {"status": status})

	# Vocabulary
	def get_vocabulary_by_lesson_id(self, lesson_id: int) -> List[schemas.Vocabulary]:
		return self._list(
			schemas.Vocabulary,
			select(models.Vocabulary).where(models.Vocabulary.lesson_id == lesson_id).order_by(models.Vocabulary.id),
		)

	def get_vocabulary(self, vocabulary_id: int) -> Optional[schemas.Vocabulary]:
		return self._get(models.Vocabulary, schemas.Vocabulary, vocabulary_id)

	def create_vocabulary(self, vocabulary: schemas.VocabularyCreate) -> schemas.Vocabulary:
		return self._insert(models.Vocabulary, schemas.Vocabulary, vocabulary.model_dump())

	# Quiz
	def get_quiz_questions_by_lesson_id(self, lesson_id: int) -> List[schemas.QuizQuestion]:
		return self._list(
			schemas.QuizQuestion,
			select(models.QuizQuestion).where(models.QuizQuestion.lesson_id == lesson_id).order_by(models.QuizQuestion.id),
		)

	def get_quiz_question(self, question_id: int) -> Optional[schemas.QuizQuestion]:
		return self._get(models.QuizQuestion, schemas.QuizQuestion, question_id)

	def create_quiz_question(self, question: schemas.QuizQuestionCreate) -> schemas.QuizQuestion:
		return self._insert(models.QuizQuestion, schemas.QuizQuestion, question.model_dump())

	def get_quiz_options_by_question_id(self, question_id: int) -> List[schemas.QuizOption]:
		return self._list(
			schemas.QuizOption,
			select(models.QuizOption).where(models.QuizOption.question_id == question_id).order_by(models.QuizOption.id),
		)

	def create_quiz_option(self, option: schemas.QuizOptionCreate) -> schemas.QuizOption:
		return self._insert(models.QuizOption, schemas.QuizOption, option.model_dump())

	# Progress
	def get_user_progress_by_user_id(self, user_id: int) -> List[schemas.UserProgress]:
		return self._list(
			schemas.UserProgress,
			select(models.UserProgress).where(models.UserProgress.user_id == user_id).order_by(models.UserProgress.id),
		)

	def get_user_progress_by_lesson_id(self, user_id: int, lesson_id: int) -> Optional[schemas.UserProgress]:
		return self._first(
			schemas.UserProgress,
			select(models.UserProgress).where(
				models.UserProgress.user_id == user_id,
				models.UserProgress.lesson_id == lesson_id,
			),
		)

	def create_user_progress(self, progress: schemas.UserProgressCreate) -> schemas.UserProgress:
		return self._insert(models.UserProgress, schemas.UserProgress, progress.model_dump())

	def update_user_progress(self, progress_id: int, changes: Dict[str, Any]) -> Optional[schemas.UserProgress]:
		return self._update(models.UserProgress, schemas.UserProgress, progress_id, changes)

	def record_lesson_completion(self, user_id: int, lesson_id: int, score: int) -> schemas.UserProgress:
		# Progress row and lesson status commit together or not at all
		with self.session() as db:
			with db.begin():
				row = db.scalars(
					select(models.UserProgress).where(
						models.UserProgress.user_id == user_id,
						models.UserProgress.lesson_id == lesson_id,
					)
				).first()
				if row is None:
					row = models.UserProgress(user_id=user_id, lesson_id=lesson_id)
					db.add(row)
				row.completed = True
				row.score = score
				row.completed_at = _now()
				lesson = db.get(models.Lesson, lesson_id)
				if lesson is not None:
					lesson.status = "completed"
			progress = schemas.UserProgress.model_validate(row)
		logger.info("User %s completed lesson %s with score %s", user_id, lesson_id, score)
		return progress

	# Conversations
	def get_conversation_scenarios(self) -> List[schemas.ConversationScenario]:
		return self._list(schemas.ConversationScenario, select(models.ConversationScenario).order_by(models.ConversationScenario.id))

	def get_conversation_scenarios_by_lesson_id(self, lesson_id: int) -> List[schemas.ConversationScenario]:
		return self._list(
			schemas.ConversationScenario,
			select(models.ConversationScenario)
			.where(models.ConversationScenario.lesson_id == lesson_id)
			.order_by(models.ConversationScenario.id),
		)

	def get_conversation_scenario(self, scenario_id: int) -> Optional[schemas.ConversationScenario]:
		return self._get(models.ConversationScenario, schemas.ConversationScenario, scenario_id)

	def create_conversation_scenario(self, scenario: schemas.ConversationScenarioCreate) -> schemas.ConversationScenario:
		return self._insert(models.ConversationScenario, schemas.ConversationScenario, scenario.model_dump())

	def get_conversation_dialogues_by_scenario_id(self, scenario_id: int) -> List[schemas.ConversationDialogue]:
		return self._list(
			schemas.ConversationDialogue,
			select(models.ConversationDialogue)
			.where(models.ConversationDialogue.scenario_id == scenario_id)
			.order_by(models.ConversationDialogue.order),
		)

	def create_conversation_dialogue(self, dialogue: schemas.ConversationDialogueCreate) -> schemas.ConversationDialogue:
		return self._insert(models.ConversationDialogue, schemas.ConversationDialogue, _dialogue_columns(dialogue))

	# Practice
	def get_user_conversation_practice_by_user_id(self, user_id: int) -> List[schemas.UserConversationPractice]:
		return self._list(
			schemas.UserConversationPractice,
			select(models.UserConversationPractice)
			.where(models.UserConversationPractice.user_id == user_id)
			.order_by(models.UserConversationPractice.id),
		)

	def get_user_conversation_practice_by_scenario_id(self, user_id: int, scenario_id: int) -> Optional[schemas.UserConversationPractice]:
		return self._first(
			schemas.UserConversationPractice,
			select(models.UserConversationPractice).where(
				models.UserConversationPractice.user_id == user_id,
				models.UserConversationPractice.scenario_id == scenario_id,
			),
		)

	def create_user_conversation_practice(self, practice: schemas.UserConversationPracticeCreate) -> schemas.UserConversationPractice:
		return self._insert(models.UserConversationPractice, schemas.UserConversationPractice, practice.model_dump())

	def update_user_conversation_practice(self, practice_id: int, changes: Dict[str, Any]) -> Optional[schemas.UserConversationPractice]:
		return self._update(models.UserConversationPractice, schemas.UserConversationPractice, practice_id, changes)


def build_storage(backend: str, bind: Optional[Engine] = None) -> Storage:
	if backend == "memory":
		return MemStorage()
	if backend == "database":
		if bind is None:
			from .db import engine as bind
		return DatabaseStorage(bind)
	raise ValueError(f"Unknown storage backend: {backend!r}")
