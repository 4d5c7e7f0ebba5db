"""Environment-based authentication for SprintSuite.

Reads the Jira API token (and optionally the login) from environment
variables, loading ``.env`` files first when enabled.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .logging import get_logger

DOTENV_LOCATIONS = ('.env', '.env.local')


def load_environment_files(dotenv_path: str | None = None) -> Path | None:
    """Load the given .env file, or the first default location found.

    Existing environment variables win over file values. Returns the file
    that was loaded, if any.
    """
    candidates = [dotenv_path] if dotenv_path else list(DOTENV_LOCATIONS)
    for location in candidates:
        env_path = Path(location).expanduser()
        if env_path.is_file():
            load_dotenv(str(env_path))
            get_logger().debug(f"Loaded environment variables from {env_path}")
            return env_path
    return None


@dataclass
class EnvAuthConfig:
    """Configuration for environment-based authentication."""

    load_dotenv: bool = True
    dotenv_path: str | None = None
    token_var: str = "JIRA_API_TOKEN"
    login_var: str = "JIRA_LOGIN"


class EnvironmentAuthManager:
    """Resolves Jira credentials from environment variables and .env files."""

    def __init__(self, config: EnvAuthConfig):
        self.config = config
        self.logger = get_logger()
        self.dotenv_file: Path | None = None

        if config.load_dotenv:
            self.dotenv_file = load_environment_files(config.dotenv_path)

    def get_token(self) -> str | None:
        """Get the Jira API token from environment variables."""
        token = os.getenv(self.config.token_var)
        if token and token.strip():
            self.logger.debug(f"Found Jira token in {self.config.token_var}")
            return token.strip()
        return None

    def get_login(self) -> str | None:
        login = os.getenv(self.config.login_var)
        return login.strip() if login and login.strip() else None

    def get_authentication_recommendations(self) -> list[str]:
        """Setup hints for a missing token; empty when a token is present."""
        if self.get_token():
            return []
        hints = [
            f"Set the {self.config.token_var} environment variable",
            f"Or create a .env file with {self.config.token_var}=your_token",
        ]
        if self.config.dotenv_path and self.dotenv_file is None:
            hints.append(f"The configured dotenv_path {self.config.dotenv_path} was not found")
        return hints


def create_env_auth_manager(config: EnvAuthConfig | None = None) -> EnvironmentAuthManager:
    """Factory function to create environment authentication manager."""
    if config is None:
        config = EnvAuthConfig()
    return EnvironmentAuthManager(config)


__all__ = [
    "EnvAuthConfig",
    "EnvironmentAuthManager",
    "create_env_auth_manager",
    "load_environment_files",
]
