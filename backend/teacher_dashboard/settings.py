from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
	# Backing data: JSON files under data_dir unless a database URL is given
	data_dir: Path = Field(default=BASE_DIR / "data", validation_alias="DATA_DIR")
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# HTTP surface
	api_prefix: str = Field(default="", validation_alias="API_PREFIX")
	cors_origins: str = Field(default="http://localhost:5173,http://localhost:3000", validation_alias="CORS_ORIGINS")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# Auth configuration
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	jwt_issuer: str = Field(default="teacher-dashboard-api", validation_alias="JWT_ISSUER")
	jwt_audience: str = Field(default="teacher-dashboard-client", validation_alias="JWT_AUDIENCE")
	access_token_expire_minutes: int = Field(default=60, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
	# Seed user, checked after the repository's users
	seed_username: str | None = Field(default=None, validation_alias="SEED_USERNAME")
	seed_password_plain: str | None = Field(default=None, validation_alias="SEED_PASSWORD")

	# Cache lifetimes
	reference_cache_ttl_minutes: float = Field(default=30, validation_alias="REFERENCE_CACHE_TTL_MINUTES")
	dashboard_cache_ttl_minutes: float = Field(default=10, validation_alias="DASHBOARD_CACHE_TTL_MINUTES")
	cache_max_entries: int = Field(default=1024, validation_alias="CACHE_MAX_ENTRIES")

	# Placeholder school/district averages until a real source exists
	school_average: float = Field(default=81.5, validation_alias="SCHOOL_AVERAGE")
	district_average: float = Field(default=79.3, validation_alias="DISTRICT_AVERAGE")
	distribution_bucket_width: int = Field(default=10, validation_alias="DISTRIBUTION_BUCKET_WIDTH")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

	@property
	def cors_origin_list(self) -> list[str]:
		return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
