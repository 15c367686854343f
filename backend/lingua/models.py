from __future__ import annotations
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from .db import Base


class User(Base):
	__tablename__ = "users"
	id = Column(Integer, primary_key=True, index=True)
	username = Column(String(128), unique=True, nullable=False, index=True)
	# passlib bcrypt hash, never the plain password
	password = Column(String(256), nullable=False)
	display_name = Column(String(128), nullable=False)
	level = Column(Integer, default=1, nullable=False)
	xp = Column(Integer, default=0, nullable=False)


class Lesson(Base):
	__tablename__ = "lessons"
	id = Column(Integer, primary_key=True, index=True)
	title = Column(String(256), nullable=False)
	description = Column(Text, nullable=False)
	image_url = Column(String(512), nullable=True)
	duration = Column(Integer, nullable=False)  # minutes
	order = Column(Integer, nullable=False)
	word_count = Column(Integer, nullable=False)
	# locked, available, in_progress, completed
	status = Column(String(32), default="locked", nullable=False)


class Vocabulary(Base):
	__tablename__ = "vocabulary"
	id = Column(Integer, primary_key=True, index=True)
	lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
	portuguese = Column(String(256), nullable=False)
	english = Column(String(256), nullable=False)
	image_url = Column(String(512), nullable=True)
	audio_url = Column(String(512), nullable=True)
	pronunciation = Column(String(256), nullable=True)
	usage = Column(Text, nullable=True)


class QuizQuestion(Base):
	__tablename__ = "quiz_questions"
	id = Column(Integer, primary_key=True, index=True)
	lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
	question = Column(Text, nullable=False)
	correct_answer = Column(String(256), nullable=False)
	explanation = Column(Text, nullable=True)


class QuizOption(Base):
	__tablename__ = "quiz_options"
	id = Column(Integer, primary_key=True, index=True)
	question_id = Column(Integer, ForeignKey("quiz_questions.id"), nullable=False, index=True)
	option = Column(String(256), nullable=False)
	is_correct = Column(Boolean, default=False, nullable=False)


class UserProgress(Base):
	__tablename__ = "user_progress"
	__table_args__ = (UniqueConstraint("user_id", "lesson_id", name="uq_user_progress_user_lesson"),)
	id = Column(Integer, primary_key=True, index=True)
	user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
	lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False)
	completed = Column(Boolean, default=False, nullable=False)
	score = Column(Integer, nullable=True)
	completed_at = Column(DateTime, nullable=True)


class ConversationScenario(Base):
	__tablename__ = "conversation_scenarios"
	id = Column(Integer, primary_key=True, index=True)
	lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
	title = Column(String(256), nullable=False)
	description = Column(Text, nullable=False)
	context = Column(Text, nullable=False)
	image_url = Column(String(512), nullable=True)
	difficulty = Column(String(32), nullable=False)
	category = Column(String(64), nullable=False)


class ConversationDialogue(Base):
	__tablename__ = "conversation_dialogues"
	id = Column(Integer, primary_key=True, index=True)
	scenario_id = Column(Integer, ForeignKey("conversation_scenarios.id"), nullable=False, index=True)
	speaker_role = Column(String(32), nullable=False)  # native_speaker, user
	portuguese = Column(Text, nullable=False)
	english = Column(Text, nullable=False)
	audio_url = Column(String(512), nullable=True)
	order = Column(Integer, nullable=False)
	hints = Column(Text, nullable=False, default="[]")  # JSON string
	accepted_responses = Column(Text, nullable=False, default="[]")  # JSON string


class UserConversationPractice(Base):
	__tablename__ = "user_conversation_practice"
	__table_args__ = (UniqueConstraint("user_id", "scenario_id", name="uq_practice_user_scenario"),)
	id = Column(Integer, primary_key=True, index=True)
	user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
	scenario_id = Column(Integer, ForeignKey("conversation_scenarios.id"), nullable=False)
	completed = Column(Boolean, default=False, nullable=False)
	accuracy = Column(Integer, nullable=True)
	completed_at = Column(DateTime, nullable=True)
