def test_list_lessons_in_order_with_camel_case_fields(client):
	res = client.get("/api/lessons")
	assert res.status_code == 200
	lessons = res.json()
	assert [lesson["title"] for lesson in lessons] == ["Basic Greetings", "Ordering Food", "Getting Around", "Shopping"]
	assert lessons[0]["wordCount"] == 6
	assert lessons[0]["status"] == "in_progress"
	assert "word_count" not in lessons[0]


def test_get_lesson(client, greetings):
	res = client.get(f"/api/lessons/{greetings.id}")
	assert res.status_code == 200
	assert res.json()["title"] == "Basic Greetings"


def test_get_unknown_lesson_is_404(client):
	res = client.get("/api/lessons/999")
	assert res.status_code == 404
	assert res.json() == {"error": "Lesson not found"}


def test_non_numeric_lesson_id_is_400(client):
	res = client.get("/api/lessons/abc")
	assert res.status_code == 400
	assert res.json() == {"error": "Invalid lesson ID"}


def test_lesson_vocabulary(client, greetings):
	res = client.get(f"/api/lessons/{greetings.id}/vocabulary")
	assert res.status_code == 200
	words = res.json()
	assert len(words) == 6
	assert {w["lessonId"] for w in words} == {greetings.id}
	assert words[0]["portuguese"] == "Olá"
	assert words[0]["audioUrl"] == "/api/audio/olá"


def test_lesson_vocabulary_for_unknown_lesson_is_empty(client):
	res = client.get("/api/lessons/999/vocabulary")
	assert res.status_code == 200
	assert res.json() == []


def test_update_lesson_status(client, greetings):
	res = client.patch(f"/api/lessons/{greetings.id}/status", json={"status": "completed"})
	assert res.status_code == 200
	assert res.json()["status"] == "completed"
	assert client.get(f"/api/lessons/{greetings.id}").json()["status"] == "completed"


def test_update_lesson_status_rejects_unknown_status(client, greetings):
	res = client.patch(f"/api/lessons/{greetings.id}/status", json={"status": "finished"})
	assert res.status_code == 400
	body = res.json()
	assert body["error"] == "Invalid data provided"
	assert body["details"]


def test_update_status_of_unknown_lesson_is_404(client):
	res = client.patch("/api/lessons/999/status", json={"status": "completed"})
	assert res.status_code == 404


def test_submit_progress_completes_lesson(client, greetings, demo_user):
	res = client.post(
		f"/api/lessons/{greetings.id}/progress",
		json={"userId": demo_user.id, "score": 4, "completed": True},
	)
	assert res.status_code == 200
	progress = res.json()
	assert progress["completed"] is True
	assert progress["score"] == 4
	assert progress["completedAt"] is not None
	assert client.get(f"/api/lessons/{greetings.id}").json()["status"] == "completed"


def test_submitting_progress_twice_keeps_one_row(client, greetings, demo_user):
	url = f"/api/lessons/{greetings.id}/progress"
	client.post(url, json={"userId": demo_user.id, "score": 2})
	client.post(url, json={"userId": demo_user.id, "score": 5})

	rows = [p for p in client.get(f"/api/users/{demo_user.id}/progress").json() if p["lessonId"] == greetings.id]
	assert len(rows) == 1
	assert rows[0]["score"] == 5


def test_progress_with_negative_score_is_rejected(client, greetings, demo_user):
	res = client.post(f"/api/lessons/{greetings.id}/progress", json={"userId": demo_user.id, "score": -1})
	assert res.status_code == 400
	assert res.json()["error"] == "Invalid data provided"


def test_progress_for_unknown_user_is_404(client, greetings):
	res = client.post(f"/api/lessons/{greetings.id}/progress", json={"userId": 999, "score": 1})
	assert res.status_code == 404
	assert res.json() == {"error": "User not found"}


def test_lesson_conversations(client):
	lessons = client.get("/api/lessons").json()
	ordering_food = next(lesson for lesson in lessons if lesson["title"] == "Ordering Food")
	scenarios = client.get(f"/api/lessons/{ordering_food['id']}/conversations").json()
	assert [s["title"] for s in scenarios] == ["Business Meeting"]


def test_oversized_ids_are_rejected_before_reaching_storage(client, greetings, demo_user):
	huge = "99999999999999999999"
	res = client.get(f"/api/lessons/{huge}")
	assert res.status_code == 400
	assert res.json() == {"error": "Invalid lesson ID"}
	assert client.get(f"/api/users/{huge}").json() == {"error": "Invalid user ID"}

	res = client.post(f"/api/lessons/{greetings.id}/progress", json={"userId": int(huge), "score": 1})
	assert res.status_code == 400
	assert res.json()["error"] == "Invalid data provided"

	res = client.post(
		f"/api/lessons/{greetings.id}/quiz/submit",
		json={"userId": int(huge), "answers": {}},
	)
	assert res.status_code == 400


def test_completion_time_reads_back_as_utc(client, greetings, demo_user):
	posted = client.post(
		f"/api/lessons/{greetings.id}/progress",
		json={"userId": demo_user.id, "score": 3},
	).json()
	fetched = client.get(f"/api/users/{demo_user.id}/lessons/{greetings.id}/progress").json()
	assert posted["completedAt"].endswith("Z")
	assert fetched["completedAt"] == posted["completedAt"]
