import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_config import setup_logging
from .seed import seed_if_empty
from .settings import settings
from .storage import Storage, build_storage
from .routers import audio, auth, conversations, health, lessons, users, vocabulary

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(StarletteHTTPException)
	async def http_error(request: Request, exc: StarletteHTTPException):
		return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=getattr(exc, "headers", None))

	@app.exception_handler(RequestValidationError)
	async def validation_error(request: Request, exc: RequestValidationError):
		return JSONResponse(
			{"error": "Invalid data provided", "details": jsonable_encoder(exc.errors())},
			status_code=400,
		)

	@app.exception_handler(Exception)
	async def unexpected_error(request: Request, exc: Exception):
		logger.exception("Unhandled error on %s %s", request.method, request.url.path)
		return JSONResponse({"error": "Internal server error"}, status_code=500)


def create_app(storage: Optional[Storage] = None, *, seed: Optional[bool] = None) -> FastAPI:
	if storage is None:
		storage = build_storage(settings.storage_backend)
	should_seed = settings.seed_demo_data if seed is None else seed

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		setup_logging()
		storage.prepare()
		if should_seed and seed_if_empty(storage):
			logger.info("Seeded demo data into %s storage", storage.backend_name)
		yield

	app = FastAPI(title="Lingua Portuguese API", lifespan=lifespan)
	app.state.storage = storage

	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors_origins,
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	register_exception_handlers(app)

	app.include_router(health.router)
	app.include_router(auth.router)
	app.include_router(lessons.router)
	app.include_router(vocabulary.router)
	app.include_router(users.router)
	app.include_router(conversations.router)
	app.include_router(audio.router)
	return app


app = create_app()


if __name__ == "__main__":
	import uvicorn

	uvicorn.run("lingua.main:app", host="0.0.0.0", port=8000)
