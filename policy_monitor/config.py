from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=BASE_DIR / ".env", env_file_encoding="utf-8")

    # OpenRouter LLM (relevance, PDF descriptions, drafts)
    OPENROUTER_API_KEY: str = ""
    OPENROUTER_MODEL: str = "google/gemini-2.0-flash-001"

    # Fetcher
    FETCH_MAX_RETRIES: int = 3
    FETCH_BACKOFF_BASE: float = 2.0  # seconds, multiplied by attempt number
    FETCH_TIMEOUT: float = 15.0
    FETCH_MIN_BYTES: int = 1000  # smaller bodies are treated as soft-404s
    FETCH_MAX_REDIRECTS: int = 5

    # Throttles for external rate limits
    PDF_REQUEST_DELAY: float = 2.0
    ANALYSIS_REQUEST_DELAY: float = 1.0
    DRAFT_REQUEST_INTERVAL: float = 5.0  # min seconds between draft oracle calls

    # Extraction
    MAX_PDFS_PER_PAGE: int = 5
    DEFAULT_DEADLINE_DAYS: int = 30

    # Policy check pipeline
    SCRAPE_MIN_STORED: int = 5  # scheduled runs skip scraping above this count
    ANALYSIS_BATCH_LIMIT: int = 10
    DRAFT_RELEVANCE_THRESHOLD: int = 50
    EMAIL_RELEVANCE_THRESHOLD: int = 70

    # Email notifications
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    EMAIL_USER: str = ""
    EMAIL_PASS: str = ""
    EMAIL_TO: str = ""  # defaults to EMAIL_USER when empty

    # Schedule
    TIMEZONE: str = "Asia/Kolkata"
    POLICY_CHECK_CRON_HOUR: int = 9
    ANALYSIS_INTERVAL_HOURS: int = 2
    STARTUP_ANALYSIS_ENABLED: bool = True

    # Paths
    POLICIES_FILE: Path = BASE_DIR / "data" / "policies.json"
    SOURCES_DIR: Path = BASE_DIR / "sources"


settings = Settings()
