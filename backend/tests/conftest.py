import os
import tempfile

# Settings are read at import time; keep tests off the real database and log dir
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="lingua-logs-"))
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from lingua.db import make_engine
from lingua.main import create_app
from lingua.seed import seed_storage
from lingua.storage import DatabaseStorage, MemStorage


@pytest.fixture(params=["memory", "database"])
def storage(request):
	if request.param == "memory":
		store = MemStorage()
		store.prepare()
		yield store
		return
	engine = make_engine("sqlite://", poolclass=StaticPool)
	store = DatabaseStorage(engine)
	store.prepare()
	yield store
	engine.dispose()


@pytest.fixture
def database_storage():
	engine = make_engine("sqlite://", poolclass=StaticPool)
	store = DatabaseStorage(engine)
	store.prepare()
	yield store
	engine.dispose()


@pytest.fixture
def seeded_storage(storage):
	seed_storage(storage)
	return storage


@pytest.fixture
def client(seeded_storage):
	app = create_app(seeded_storage, seed=False)
	with TestClient(app) as c:
		yield c


@pytest.fixture
def demo_user(seeded_storage):
	return seeded_storage.get_user_by_username("demo")


@pytest.fixture
def greetings(seeded_storage):
	return next(lesson for lesson in seeded_storage.get_lessons() if lesson.title == "Basic Greetings")
