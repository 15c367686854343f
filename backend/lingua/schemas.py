"""
Wire and storage record shapes.

Every entity has an ``XCreate`` model (what seed data and storage.create_x
accept) and an ``X`` model (a stored row, with its id). Both storage
implementations hand these models back, so routers never see ORM rows.
Fields are snake_case in Python and camelCase on the wire.
"""
from __future__ import annotations
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


LessonStatus = Literal["locked", "available", "in_progress", "completed"]
SpeakerRole = Literal["native_speaker", "user"]

# Largest id a 64-bit INTEGER column can hold
MAX_ID = 2**63 - 1


class CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
	# SQLite drops tzinfo on the way back; stored timestamps are always UTC
	if value is not None and value.tzinfo is None:
		return value.replace(tzinfo=timezone.utc)
	return value


def parse_string_list(value: Any) -> List[str]:
	"""Normalise a list column that may arrive as a list or a JSON-encoded string."""
	if value is None:
		return []
	if isinstance(value, (list, tuple)):
		return [str(v) for v in value]
	if isinstance(value, str):
		if not value.strip():
			return []
		try:
			decoded = json.loads(value)
		except ValueError:
			logger.warning("Could not parse list column as JSON: %r", value[:80])
			return []
		if isinstance(decoded, list):
			return [str(v) for v in decoded]
		logger.warning("List column decoded to %s, expected a list", type(decoded).__name__)
		return []
	logger.warning("Unexpected list column type %s", type(value).__name__)
	return []


# ---- Users ----

class UserCreate(CamelModel):
	username: str
	password: str
	display_name: str
	level: int = 1
	xp: int = 0


class User(UserCreate):
	id: int


class UserPublic(CamelModel):
	id: int
	username: str
	display_name: str
	level: int
	xp: int


class UserProfile(UserPublic):
	progress_percentage: int


# ---- Lessons & vocabulary ----

class LessonCreate(CamelModel):
	title: str
	description: str
	image_url: Optional[str] = None
	duration: int
	order: int
	word_count: int
	status: LessonStatus = "locked"


class Lesson(LessonCreate):
	id: int


class VocabularyCreate(CamelModel):
	lesson_id: int
	portuguese: str
	english: str
	image_url: Optional[str] = None
	audio_url: Optional[str] = None
	pronunciation: Optional[str] = None
	usage: Optional[str] = None


class Vocabulary(VocabularyCreate):
	id: int


class VocabularySearchResult(Vocabulary):
	lesson_title: str


# ---- Quiz ----

class QuizQuestionCreate(CamelModel):
	lesson_id: int
	question: str
	correct_answer: str
	explanation: Optional[str] = None


class QuizQuestion(QuizQuestionCreate):
	id: int


class QuizOptionCreate(CamelModel):
	question_id: int
	option: str
	# Kept in sync with QuizQuestion.correct_answer at seed time; scoring never reads it
	is_correct: bool = False


class QuizOption(QuizOptionCreate):
	id: int


class QuizOptionPublic(CamelModel):
	id: int
	option: str


class QuizQuestionWithOptions(QuizQuestion):
	options: List[QuizOptionPublic]


# ---- Progress ----

class UserProgressCreate(CamelModel):
	user_id: int
	lesson_id: int
	completed: bool = False
	score: Optional[int] = None
	completed_at: Optional[datetime] = None

	@field_validator("completed_at")
	@classmethod
	def _completed_at_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
		return as_utc(value)


class UserProgress(UserProgressCreate):
	id: int


# ---- Conversations ----

class ConversationScenarioCreate(CamelModel):
	lesson_id: int
	title: str
	description: str
	context: str
	image_url: Optional[str] = None
	difficulty: str
	category: str


class ConversationScenario(ConversationScenarioCreate):
	id: int


class ConversationDialogueCreate(CamelModel):
	scenario_id: int
	speaker_role: SpeakerRole
	portuguese: str
	english: str
	audio_url: Optional[str] = None
	order: int
	hints: List[str] = Field(default_factory=list)
	accepted_responses: List[str] = Field(default_factory=list)

	@field_validator("hints", "accepted_responses", mode="before")
	@classmethod
	def _normalise_list(cls, value: Any) -> List[str]:
		return parse_string_list(value)


class ConversationDialogue(ConversationDialogueCreate):
	id: int


class UserConversationPracticeCreate(CamelModel):
	user_id: int
	scenario_id: int
	completed: bool = False
	accuracy: Optional[int] = None
	completed_at: Optional[datetime] = None

	@field_validator("completed_at")
	@classmethod
	def _completed_at_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
		return as_utc(value)


class UserConversationPractice(UserConversationPracticeCreate):
	id: int


# ---- Request bodies ----

class LessonStatusUpdate(CamelModel):
	status: LessonStatus


class ProgressSubmission(CamelModel):
	user_id: int = Field(ge=1, le=MAX_ID)
	score: int = Field(ge=0)
	# Sent by clients alongside the score; a submission always completes the lesson
	completed: bool = True


class PracticeSubmission(CamelModel):
	user_id: int = Field(ge=1, le=MAX_ID)
	accuracy: int = Field(ge=0, le=100)


class QuizSubmission(CamelModel):
	user_id: int = Field(ge=1, le=MAX_ID)
	answers: Dict[int, str] = Field(description="Chosen option text keyed by question id")


class ResponseCheck(CamelModel):
	response: str


# ---- Derived responses ----

class AnswerResult(CamelModel):
	question_id: int
	answer: Optional[str] = None
	correct_answer: str
	correct: bool
	explanation: Optional[str] = None


class QuizResult(CamelModel):
	score: int
	total: int
	results: List[AnswerResult]
	progress: UserProgress


class ResponseCheckResult(CamelModel):
	correct: bool
	expected: str


class UserStatistics(CamelModel):
	completed_lessons: int
	total_lessons: int
	progress_percentage: int
	average_score: int
	vocabulary_count: int
	level: int
	xp: int


class Certificate(CamelModel):
	user_id: int
	user_name: str
	completed_lessons: int
	total_lessons: int
	progress_percentage: int
	certificate_level: str
	certificate_date: str
	serial_number: str
