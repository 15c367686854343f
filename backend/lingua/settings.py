from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Database
	database_url: str = Field(default="sqlite:///./lingua.db", validation_alias="DATABASE_URL")
	# "database" (SQLAlchemy) or "memory" (process-local demo store)
	storage_backend: str = Field(default="database", validation_alias="STORAGE_BACKEND")
	# Seed the demo user and sample curriculum when no lessons exist yet
	seed_demo_data: bool = Field(default=True, validation_alias="SEED_DEMO_DATA")

	# Auth configuration
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=120, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
	bcrypt_rounds: int = Field(default=12, validation_alias="BCRYPT_ROUNDS")

	# Logging
	log_dir: str = Field(default="log", validation_alias="LOG_DIR")
	log_file: str = Field(default="lingua.log", validation_alias="LOG_FILE")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# Certificates are issued from this overall progress percentage upwards
	certificate_min_percentage: int = Field(default=25, validation_alias="CERTIFICATE_MIN_PERCENTAGE")

	cors_origins: List[str] = Field(default=["*"], validation_alias="CORS_ORIGINS")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
