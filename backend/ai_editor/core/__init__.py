"""
Core module initialization.
"""

from ai_editor.core.config import AIConfig, AppConfig, get_config, load_config
from ai_editor.core.logging import get_logger, setup_logging
from ai_editor.core.security import CredentialSource, decrypt_api_key, encrypt_api_key

__all__ = [
    "AIConfig",
    "AppConfig",
    "get_config",
    "load_config",
    "get_logger",
    "setup_logging",
    "CredentialSource",
    "encrypt_api_key",
    "decrypt_api_key",
]
