import pytest

from lingua import schemas
from lingua.storage import upsert


def _lesson(order, title=None, status="available"):
	return schemas.LessonCreate(
		title=title or f"Lesson {order}",
		description="desc",
		duration=10,
		order=order,
		word_count=5,
		status=status,
	)


def test_vocabulary_by_lesson_only_returns_that_lesson(seeded_storage):
	lessons = seeded_storage.get_lessons()
	other = lessons[1]
	seeded_storage.create_vocabulary(schemas.VocabularyCreate(lesson_id=other.id, portuguese="Cardápio", english="Menu"))
	for lesson in lessons:
		rows = seeded_storage.get_vocabulary_by_lesson_id(lesson.id)
		assert all(row.lesson_id == lesson.id for row in rows)
	assert [v.portuguese for v in seeded_storage.get_vocabulary_by_lesson_id(other.id)] == ["Cardápio"]


def test_lessons_are_sorted_by_order(storage):
	storage.create_lesson(_lesson(3))
	storage.create_lesson(_lesson(1))
	storage.create_lesson(_lesson(2))
	assert [lesson.order for lesson in storage.get_lessons()] == [1, 2, 3]


def test_progress_percentage_is_zero_without_lessons(storage):
	user = storage.create_user(schemas.UserCreate(username="ana", password="x", display_name="Ana"))
	assert storage.is_empty()
	assert storage.calculate_user_progress_percentage(user.id) == 0


def test_progress_percentage_reaches_100_when_every_lesson_is_completed(seeded_storage, demo_user):
	for lesson in seeded_storage.get_lessons():
		seeded_storage.record_lesson_completion(demo_user.id, lesson.id, 3)
	assert seeded_storage.calculate_user_progress_percentage(demo_user.id) == 100


def test_progress_percentage_rounds_to_nearest_integer(storage):
	user = storage.create_user(schemas.UserCreate(username="ana", password="x", display_name="Ana"))
	lessons = [storage.create_lesson(_lesson(i)) for i in (1, 2, 3)]
	storage.record_lesson_completion(user.id, lessons[0].id, 1)
	assert storage.calculate_user_progress_percentage(user.id) == 33
	storage.record_lesson_completion(user.id, lessons[1].id, 1)
	assert storage.calculate_user_progress_percentage(user.id) == 67


def test_progress_percentage_ignores_incomplete_rows(seeded_storage, demo_user):
	# The seeded in-progress row for Basic Greetings is not completed
	assert seeded_storage.get_user_progress_by_user_id(demo_user.id)
	assert seeded_storage.calculate_user_progress_percentage(demo_user.id) == 0


def test_submitting_progress_twice_keeps_one_row_with_latest_score(seeded_storage, demo_user):
	lesson = seeded_storage.get_lessons()[2]
	first = seeded_storage.record_lesson_completion(demo_user.id, lesson.id, 2)
	second = seeded_storage.record_lesson_completion(demo_user.id, lesson.id, 5)

	rows = [p for p in seeded_storage.get_user_progress_by_user_id(demo_user.id) if p.lesson_id == lesson.id]
	assert len(rows) == 1
	assert rows[0].id == first.id == second.id
	assert rows[0].score == 5
	assert rows[0].completed is True
	assert rows[0].completed_at is not None


def test_lesson_completion_marks_lesson_completed(seeded_storage, demo_user, greetings):
	assert greetings.status == "in_progress"
	seeded_storage.record_lesson_completion(demo_user.id, greetings.id, 4)
	assert seeded_storage.get_lesson(greetings.id).status == "completed"
	progress = seeded_storage.get_user_progress_by_lesson_id(demo_user.id, greetings.id)
	assert progress.completed is True
	assert progress.score == 4


def test_practice_upsert_keeps_one_row(seeded_storage, demo_user):
	scenario = seeded_storage.get_conversation_scenarios()[0]
	seeded_storage.record_conversation_practice(demo_user.id, scenario.id, 40)
	seeded_storage.record_conversation_practice(demo_user.id, scenario.id, 90)

	rows = [p for p in seeded_storage.get_user_conversation_practice_by_user_id(demo_user.id) if p.scenario_id == scenario.id]
	assert len(rows) == 1
	assert rows[0].accuracy == 90
	assert rows[0].completed is True


def test_update_missing_lesson_returns_none(storage):
	assert storage.update_lesson_status(999, "completed") is None
	assert storage.update_user_progress(999, {"score": 1}) is None


def test_dialogues_come_back_in_script_order(storage):
	lesson = storage.create_lesson(_lesson(1))
	scenario = storage.create_conversation_scenario(
		schemas.ConversationScenarioCreate(
			lesson_id=lesson.id, title="Café", description="d", context="c", difficulty="beginner", category="food",
		)
	)
	for order in (2, 1, 3):
		storage.create_conversation_dialogue(
			schemas.ConversationDialogueCreate(
				scenario_id=scenario.id, speaker_role="native_speaker", portuguese=f"Linha {order}", english="", order=order,
			)
		)
	dialogues = storage.get_conversation_dialogues_by_scenario_id(scenario.id)
	assert [d.order for d in dialogues] == [1, 2, 3]


def test_get_user_by_username(seeded_storage):
	assert seeded_storage.get_user_by_username("demo").display_name == "Maria"
	assert seeded_storage.get_user_by_username("nobody") is None


@pytest.mark.parametrize("existing, expected", [(None, "created"), ("row", "updated")])
def test_upsert_helper(existing, expected):
	result = upsert(existing, lambda: "created", lambda row: "updated")
	assert result == expected


def test_upsert_helper_creates_when_update_finds_nothing():
	assert upsert("stale", lambda: "created", lambda row: None) == "created"
