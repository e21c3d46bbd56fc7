"""
Configuration management for the Grant Discovery pipeline.

Loads settings from environment variables with sensible defaults.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / '.env'
if _env_file.exists():
    load_dotenv(_env_file)


class Config:
    """Configuration settings loaded from environment."""

    # OpenAI (search-augmented extraction)
    OPENAI_API_KEY: str = os.getenv('OPENAI_API_KEY', '')
    OPENAI_SEARCH_MODEL: str = os.getenv('OPENAI_SEARCH_MODEL', 'gpt-4.1-mini')

    # Mail service webhook (new-grant digests)
    MAIL_WEBHOOK_URL: str = os.getenv('MAIL_WEBHOOK_URL', '')
    MAIL_API_KEY: str = os.getenv('MAIL_API_KEY', '')
    MAIL_SENDER: str = os.getenv('MAIL_SENDER', 'grant-discovery@localhost')
    MAIL_TIMEOUT_SECONDS: float = float(os.getenv('MAIL_TIMEOUT_SECONDS', '30'))

    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def validate(cls) -> list[str]:
        """
        Validate that required configuration is present.

        The mail webhook is optional; without it notification attempts fail
        and are logged, but discovery still works.

        Returns:
            List of missing required configuration keys
        """
        missing = []
        if not cls.OPENAI_API_KEY:
            missing.append('OPENAI_API_KEY')
        return missing


# Singleton config instance
config = Config()
