import inspect

import pytest
from fastapi.testclient import TestClient

from lingua import main
from lingua.main import create_app
from lingua.routers import auth, conversations, lessons, users, vocabulary
from lingua.seed import DEMO_USERNAME, seed_if_empty
from lingua.storage import MemStorage, build_storage


class BrokenStorage(MemStorage):
	def get_lessons(self):
		raise RuntimeError("disk on fire")


def test_health_reports_backend(client, seeded_storage):
	res = client.get("/api/health")
	assert res.status_code == 200
	assert res.json() == {"status": "ok", "storage": seeded_storage.backend_name}


def test_audio_has_no_content(client):
	res = client.get("/api/audio/bom_dia")
	assert res.status_code == 204
	assert res.content == b""


def test_unknown_route_uses_error_shape(client):
	res = client.get("/api/nope")
	assert res.status_code == 404
	assert res.json() == {"error": "Not Found"}


def test_unexpected_errors_become_500():
	app = create_app(BrokenStorage(), seed=False)
	with TestClient(app, raise_server_exceptions=False) as c:
		res = c.get("/api/lessons")
	assert res.status_code == 500
	assert res.json() == {"error": "Internal server error"}


def test_startup_seeds_empty_storage():
	storage = MemStorage()
	with TestClient(create_app(storage, seed=True)) as c:
		assert len(c.get("/api/lessons").json()) == 4
	assert storage.get_user_by_username(DEMO_USERNAME) is not None
	# Second run finds lessons and leaves them alone
	assert seed_if_empty(storage) is False
	assert len(storage.get_lessons()) == 4


def test_startup_without_seeding_leaves_storage_empty():
	storage = MemStorage()
	with TestClient(create_app(storage, seed=False)) as c:
		assert c.get("/api/lessons").json() == []


def test_build_storage():
	assert isinstance(build_storage("memory"), MemStorage)
	with pytest.raises(ValueError, match="redis"):
		build_storage("redis")


def test_logging_is_configured_on_startup_not_on_creation(monkeypatch):
	calls = []
	monkeypatch.setattr(main, "setup_logging", lambda: calls.append(1))
	app = create_app(MemStorage(), seed=False)
	assert calls == []
	with TestClient(app):
		assert calls == [1]


@pytest.mark.parametrize("router", [lessons.router, users.router, conversations.router, vocabulary.router, auth.router])
def test_storage_bound_handlers_run_in_threadpool(router):
	for route in router.routes:
		assert not inspect.iscoroutinefunction(route.endpoint), route.path
