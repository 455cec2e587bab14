"""
Application configuration using Pydantic Settings.
All environment-specific values are centralized here.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "RFP Analyzer"
    debug: bool = False

    # ── LLM (Groq) ───────────────────────────────────────
    groq_api_key: str = ""
    llm_model: str = "llama-3.3-70b-versatile"
    llm_temperature: float = 0.1
    llm_max_tokens: int = 4096

    # ── MongoDB ──────────────────────────────────────────
    mongodb_uri: str = ""
    mongodb_database: str = "rfp_analyzer"

    # ── File Storage ─────────────────────────────────────
    local_storage_path: str = "./storage"
    max_upload_bytes: int = 20 * 1024 * 1024

    # ── Extraction Limits ────────────────────────────────
    max_document_chars: int = 100_000

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
