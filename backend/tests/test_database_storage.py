import json

from sqlalchemy import select

from lingua import models, schemas
from lingua.seed import seed_storage


def _scenario(storage):
	lesson = storage.create_lesson(
		schemas.LessonCreate(title="Café", description="d", duration=5, order=1, word_count=3, status="available")
	)
	return storage.create_conversation_scenario(
		schemas.ConversationScenarioCreate(
			lesson_id=lesson.id, title="No café", description="d", context="c", difficulty="beginner", category="food",
		)
	)


def test_dialogue_lists_are_stored_as_json_text(database_storage):
	scenario = _scenario(database_storage)
	created = database_storage.create_conversation_dialogue(
		schemas.ConversationDialogueCreate(
			scenario_id=scenario.id,
			speaker_role="user",
			portuguese="Um café, por favor.",
			english="A coffee, please.",
			order=1,
			hints=["Ask politely"],
			accepted_responses=["Um café", "Por favor"],
		)
	)
	assert created.accepted_responses == ["Um café", "Por favor"]

	with database_storage.session() as db:
		row = db.scalars(select(models.ConversationDialogue)).one()
		assert json.loads(row.accepted_responses) == ["Um café", "Por favor"]
		assert "café" in row.accepted_responses


def test_raw_json_strings_come_back_as_lists(database_storage):
	scenario = _scenario(database_storage)
	with database_storage.session() as db:
		db.add_all([
			models.ConversationDialogue(
				scenario_id=scenario.id, speaker_role="user", portuguese="Sim", english="Yes", order=1,
				hints='["Agree"]', accepted_responses='["Sim", "Claro"]',
			),
			models.ConversationDialogue(
				scenario_id=scenario.id, speaker_role="user", portuguese="Não", english="No", order=2,
				hints="not json", accepted_responses="",
			),
		])
		db.commit()

	first, second = database_storage.get_conversation_dialogues_by_scenario_id(scenario.id)
	assert first.hints == ["Agree"]
	assert first.accepted_responses == ["Sim", "Claro"]
	assert second.hints == []
	assert second.accepted_responses == []


def test_lesson_completion_writes_progress_and_status_together(database_storage):
	user = seed_storage(database_storage)
	lesson = database_storage.get_lessons()[3]
	progress = database_storage.record_lesson_completion(user.id, lesson.id, 9)
	assert progress.id is not None
	assert progress.score == 9

	with database_storage.session() as db:
		rows = db.scalars(
			select(models.UserProgress).where(models.UserProgress.lesson_id == lesson.id)
		).all()
		assert len(rows) == 1
		assert db.get(models.Lesson, lesson.id).status == "completed"


def test_seeded_passwords_are_hashed(database_storage):
	user = seed_storage(database_storage)
	assert user.password != "demo123"
	assert user.password.startswith("$2")
