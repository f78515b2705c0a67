"""Runtime configuration read from the environment."""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from sources.todoist_client import TodoistClient
from storage.calendar_cache import CalendarCache


@dataclass
class Settings:
    """Settings for the calendar feed server."""
    api_token: Optional[str]
    verification_token: Optional[str]
    port: int = 3000
    log_level: str = 'INFO'
    timeout_seconds: int = 30
    cache_ttl_seconds: int = CalendarCache.DEFAULT_TTL_SECONDS
    todoist_api_url: str = TodoistClient.BASE_URL

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> 'Settings':
        """
        Build settings from environment variables.

        Args:
            load_env_file: Load a .env file into the environment first

        Returns:
            Settings instance
        """
        if load_env_file:
            load_dotenv(find_dotenv(usecwd=True))

        return cls(
            api_token=os.environ.get('API_TOKEN') or os.environ.get('TODOIST_API_TOKEN'),
            verification_token=os.environ.get('VERIFICATION_TOKEN'),
            port=int(os.environ.get('PORT', '3000')),
            log_level=os.environ.get('LOG_LEVEL', 'INFO'),
            timeout_seconds=int(os.environ.get('TIMEOUT_SECONDS', '30')),
            cache_ttl_seconds=int(
                os.environ.get('CACHE_TTL_SECONDS', str(CalendarCache.DEFAULT_TTL_SECONDS))
            ),
            todoist_api_url=os.environ.get('TODOIST_API_URL', TodoistClient.BASE_URL)
        )
