"""
Release Notes Forge — Backend Configuration
Loads .env automatically, then reads all settings from environment variables.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from relnotes.errors import ConfigurationError
from relnotes.models.commit import VersionBump
from relnotes.pipeline.categorize import suggest_version
from relnotes.pipeline.draft import release_month

_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(_env_path)

DEFAULT_PRODUCT_CONTEXT = "n-aible, an AI-powered EdTech simulation platform"


@dataclass(frozen=True)
class LLMConfig:
    """Gemini credentials and per-stage model choices."""
    api_key: str
    classify_model: str
    writer_model: str
    timeout: float
    temperature: float


@dataclass(frozen=True)
class CommitSourceConfig:
    """Where raw commits come from: the embedded sample or a git checkout."""
    kind: str
    repo_path: str


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""
    host: str
    port: int
    debug: bool
    llm: LLMConfig
    commits: CommitSourceConfig
    product_context: str
    current_version: str
    release_date: str


def _load_config() -> AppConfig:
    return AppConfig(
        host=os.getenv("APP_HOST", "0.0.0.0"),
        port=int(os.getenv("APP_PORT", "3001")),
        debug=os.getenv("APP_DEBUG", "false").lower() == "true",
        llm=LLMConfig(
            api_key=os.getenv("GOOGLE_API_KEY", ""),
            classify_model=os.getenv("LLM_CLASSIFY_MODEL", "gemini-2.0-flash-lite"),
            writer_model=os.getenv("LLM_WRITER_MODEL", "gemini-2.0-flash"),
            timeout=float(os.getenv("LLM_TIMEOUT", "60")),
            temperature=float(os.getenv("LLM_TEMPERATURE", "0.2")),
        ),
        commits=CommitSourceConfig(
            kind=os.getenv("COMMIT_SOURCE", "sample").lower(),
            repo_path=os.getenv("GIT_REPO_PATH", "."),
        ),
        product_context=os.getenv("PRODUCT_CONTEXT", DEFAULT_PRODUCT_CONTEXT),
        current_version=os.getenv("CURRENT_VERSION", "").strip(),
        release_date=os.getenv("RELEASE_DATE", "").strip(),
    )


def validate_config(cfg: AppConfig) -> None:
    """Raise if the settings needed for a run are missing or invalid.

    Checked when the generator is built rather than at import time, so the
    API (and its tests) can start without a key.
    """
    missing: list[str] = []
    if not cfg.llm.api_key:
        missing.append("GOOGLE_API_KEY")
    if cfg.commits.kind not in ("sample", "git"):
        missing.append(f"COMMIT_SOURCE (got '{cfg.commits.kind}', expected sample|git)")
    if cfg.current_version:
        try:
            suggest_version(VersionBump.PATCH, cfg.current_version)
        except ConfigurationError as exc:
            missing.extend(exc.missing)
    if cfg.release_date:
        try:
            release_month(cfg.release_date)
        except ConfigurationError as exc:
            missing.extend(exc.missing)
    if missing:
        raise ConfigurationError(missing)


settings = _load_config()
