"""
Core configuration module for the AI Code Editor backend.
Loads configuration from YAML file and environment variables.
"""

import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 3001
    debug: bool = False


class LoggingConfig(BaseModel):
    """Logging configuration."""

    name: str = "ai_editor"
    file: Optional[str] = "app.log"  # None disables the file handler
    console: bool = True
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size: int = 10  # MB
    backup_count: int = 5
    # These print full request URLs, and Gemini URLs carry the API key.
    quiet_loggers: List[str] = Field(default_factory=lambda: ["httpx", "httpcore"])


class CacheConfig(BaseModel):
    """Response cache configuration."""

    backend: str = "memory"  # "memory" or "sqlite"
    path: str = "data/cache.db"
    default_ttl: int = 120
    check_period: int = 60


class ProviderConfig(BaseModel):
    """One entry of the provider catalog."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    protocol: str = "openai-compatible"
    endpoint: str
    model: str
    model_env: Optional[str] = None
    credential_ref: str
    strengths: List[str] = Field(default_factory=list)
    priority: int = 100
    headers: Dict[str, str] = Field(default_factory=dict)
    organization_ref: Optional[str] = None
    project_ref: Optional[str] = None


DEFAULT_PROVIDERS: List[dict] = [
    {
        "id": "groq",
        "name": "Groq (Fast & Free)",
        "endpoint": "https://api.groq.com/openai/v1/chat/completions",
        "model": "llama-3.3-70b-versatile",
        "credential_ref": "GROQ_API_KEY",
        "strengths": ["code-generation", "explanation", "debugging", "optimization", "general"],
        "priority": 0,
    },
    {
        "id": "openai",
        "name": "OpenAI GPT-3.5-Turbo",
        "endpoint": "https://api.openai.com/v1/chat/completions",
        "model": "gpt-3.5-turbo",
        "credential_ref": "OPENAI_API_KEY",
        "strengths": ["code-generation", "explanation", "debugging"],
        "priority": 1,
        "organization_ref": "OPENAI_ORG_ID",
        "project_ref": "OPENAI_PROJECT_ID",
    },
    {
        "id": "openrouter",
        "name": "OpenRouter",
        "endpoint": "https://openrouter.ai/api/v1/chat/completions",
        "model": "openai/gpt-3.5-turbo",
        "model_env": "OPENROUTER_MODEL",
        "credential_ref": "OPENROUTER_API_KEY",
        "strengths": ["code-generation", "optimization", "general"],
        "priority": 2,
        "headers": {"HTTP-Referer": "http://localhost:5173"},
    },
    {
        "id": "google",
        "name": "Google Gemini",
        "protocol": "gemini",
        "endpoint": "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
        "model": "gemini-pro",
        "credential_ref": "GOOGLE_API_KEY",
        "strengths": ["explanation"],
        "priority": 3,
    },
    {
        "id": "perplexity",
        "name": "Perplexity",
        "protocol": "perplexity-search",
        "endpoint": "https://api.perplexity.ai/chat/completions",
        "model": "sonar",
        "model_env": "PERPLEXITY_MODEL",
        "credential_ref": "PERPLEXITY_API_KEY",
        "strengths": ["search"],
        "priority": 4,
    },
]

DEFAULT_TASK_POLICIES: Dict[str, List[str]] = {
    "code-generation": ["groq", "openai", "openrouter", "google"],
    "explanation": ["groq", "openai", "google", "openrouter"],
    "debugging": ["groq", "openai", "openrouter", "google"],
    "optimization": ["groq", "openai", "openrouter", "google"],
    "search": ["perplexity", "groq", "google"],
    "general": ["groq", "openai", "openrouter", "google"],
}


class AIConfig(BaseModel):
    """Provider catalog and task policies.

    Built once at startup and handed to the orchestrator; never mutated.
    """

    model_config = ConfigDict(frozen=True)

    providers: List[ProviderConfig] = Field(
        default_factory=lambda: [ProviderConfig(**p) for p in DEFAULT_PROVIDERS]
    )
    task_policies: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_TASK_POLICIES.items()}
    )
    request_timeout: float = 30.0
    # credential_ref -> secret; values prefixed "enc:" are Fernet-encrypted
    credentials: Dict[str, str] = Field(default_factory=dict)


class AppConfig(BaseSettings):
    """Main application configuration.

    Values come from config.yaml; any field can be overridden from the
    environment, e.g. AI_EDITOR_SERVER__PORT=8080.
    """

    model_config = SettingsConfigDict(env_prefix="AI_EDITOR_", env_nested_delimiter="__")

    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()
    cache: CacheConfig = CacheConfig()
    ai: AIConfig = AIConfig()


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent.parent


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to the configuration file. If None, uses default location.

    Returns:
        AppConfig instance with loaded configuration.
    """
    if config_path is None:
        config_path = os.environ.get("AI_EDITOR_CONFIG")
        if config_path is None:
            config_path = get_project_root() / "config.yaml"

    config_path = Path(config_path)

    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
            return AppConfig(**config_data)

    return AppConfig()


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def _resolve_data_dir() -> Path:
    """
    Resolve the data directory path.

    Container mode uses the DATA_DIR environment variable (e.g. /app/data);
    local development uses project_root/data.
    """
    data_dir_env = os.environ.get("DATA_DIR")

    if data_dir_env:
        return Path(data_dir_env).resolve()
    return (get_project_root() / "data").resolve()


def get_cache_db_path() -> Path:
    """
    Get the absolute path to the SQLite cache file.

    Only the filename from config.yaml 'cache.path' is used; the file always
    lives in the data directory.
    """
    config = get_config()
    db_filename = Path(config.cache.path).name or "cache.db"

    db_path = (_resolve_data_dir() / db_filename).resolve()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return db_path


def get_log_path(filename: Optional[str] = None) -> Path:
    """
    Get the absolute path to the log file (``filename`` defaults to logging.file).

    Supports both container and local development modes:
    - Container: /app/logs/app.log
    - Local: project_root/logs/app.log
    """
    filename = filename or get_config().logging.file or "app.log"

    logs_dir_env = os.environ.get("LOGS_DIR")

    if logs_dir_env:
        log_dir = Path(logs_dir_env)
    else:
        log_dir = get_project_root() / "logs"

    log_dir.mkdir(parents=True, exist_ok=True)

    # Use only the filename from config so logs never go outside logs/
    name = Path(filename).name or "app.log"
    return log_dir / name
