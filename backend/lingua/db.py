from __future__ import annotations
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from .settings import settings


Base = declarative_base()


def make_engine(url: str, **kwargs) -> Engine:
	connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
	return create_engine(url, connect_args=connect_args, future=True, **kwargs)


def make_session_factory(bind: Engine) -> sessionmaker:
	return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind, future=True)


engine = make_engine(settings.database_url)
SessionLocal = make_session_factory(engine)

