"""
Centralized configuration using pydantic-settings.

How it works:
- Reads environment variables automatically (e.g., MAX_CONCURRENT env var → Settings.MAX_CONCURRENT)
- Falls back to defaults defined here if env vars are not set
- Can also read from a .env file in the project root

Every module imports `settings` from here instead of hardcoding values.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Task queue ──────────────────────────────────────────────
    MAX_CONCURRENT: int = 100          # 1 = strictly serial, large N = throughput mode
    MAX_BATCH_SIZE: int = 50           # max image ids accepted per transform request

    # ── AI transformation service ───────────────────────────────
    AI_API_KEY: str = ""
    AI_BASE_URL: str = "https://api.openai.com/v1"
    AI_MODEL: str = "gpt-4o-image"
    AI_STREAM: bool = True
    AI_MAX_TOKENS: int = 4096
    AI_MAX_RESPONSE_BYTES: int = 32 * 1024 * 1024
    AI_TIMEOUT: float = 300.0          # seconds; a hung call must not hold a slot forever

    # ── Job store ───────────────────────────────────────────────
    STORE_BACKEND: str = "memory"      # "memory" or "sql"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "styleshift"
    POSTGRES_PASSWORD: str = "styleshift"
    POSTGRES_DB: str = "styleshift"

    # ── App ─────────────────────────────────────────────────────
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    @property
    def database_url(self) -> str:
        """Sync connection string for the SQL job store (uses psycopg2 driver)."""
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton, import this everywhere
settings = Settings()
