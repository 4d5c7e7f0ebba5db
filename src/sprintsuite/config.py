from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml
from jsonschema import Draft7Validator

from .env_auth import load_environment_files

DEFAULT_CONFIG_FILE = 'sprint_suite.config.yaml'
DEFAULT_SPRINT_STATE = 'active,closed'
VALID_SPRINT_STATES = ('future', 'active', 'closed')
AUTH_TYPES = ('basic', 'bearer')
TOKEN_ENV_VAR = 'JIRA_API_TOKEN'

CONFIG_SCHEMA: dict[str, Any] = {
    '$schema': 'http://json-schema.org/draft-07/schema#',
    'type': 'object',
    'properties': {
        'version': {'type': 'integer', 'minimum': 1},
        'server': {'type': 'string'},
        'login': {'type': ['string', 'null']},
        'auth_type': {'type': 'string', 'enum': list(AUTH_TYPES)},
        'project': {
            'type': 'object',
            'properties': {'key': {'type': 'string', 'pattern': '^[A-Za-z][A-Za-z0-9_]*$'}},
        },
        'board': {
            'type': 'object',
            'properties': {'id': {'type': ['integer', 'null'], 'minimum': 1}},
        },
        'sprint': {
            'type': 'object',
            'properties': {'state': {'type': 'string'}},
        },
        'logging': {
            'type': 'object',
            'properties': {
                'json_enabled': {'type': 'boolean'},
                'level': {'type': 'string'},
            },
        },
        'telemetry': {
            'type': 'object',
            'properties': {
                'enabled': {'type': 'boolean'},
                'store_path': {'type': ['string', 'null']},
            },
        },
        'environment': {
            'type': 'object',
            'properties': {
                'load_dotenv': {'type': 'boolean'},
                'dotenv_path': {'type': ['string', 'null']},
            },
        },
    },
}

_VALIDATOR = Draft7Validator(CONFIG_SCHEMA)


class ConfigError(RuntimeError):
    pass


@dataclass
class SuiteConfig:
    version: int
    source_file: Path | None
    server: str
    login: str | None
    auth_type: str
    project_key: str
    board_id: int | None
    sprint_state: str
    # Logging configuration
    logging_json_enabled: bool
    logging_level: str
    # Telemetry configuration
    telemetry_enabled: bool
    telemetry_store_path: str | None
    # Environment authentication configuration
    env_auth_load_dotenv: bool
    env_auth_dotenv_path: str | None

    def browse_url(self) -> str:
        return generate_browse_url(self.server, self.project_key)


def generate_browse_url(server: str, key: str) -> str:
    return f"{server.rstrip('/')}/browse/{key}"


def parse_sprint_state(value: str | None) -> str:
    """Validate a comma separated sprint state filter and return it normalised."""
    if value is None or not value.strip():
        return DEFAULT_SPRINT_STATE
    states = [part.strip().lower() for part in value.split(',') if part.strip()]
    invalid = [s for s in states if s not in VALID_SPRINT_STATES]
    if invalid:
        raise ConfigError(
            f"Invalid sprint state(s) {', '.join(invalid)}; "
            f"valid values are {', '.join(VALID_SPRINT_STATES)}"
        )
    return ','.join(states)


def _resolve_env_var(value: Any) -> Any:
    """Resolve environment variable if value starts with $.

    An unset variable resolves to ``None`` so that callers fall back to their
    own defaults instead of sending the literal reference to Jira.
    """
    if isinstance(value, str) and value.startswith('$'):
        return os.getenv(value[1:]) or None
    return value


def _validate(raw: Any, source: Path) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ConfigError(f'Configuration in {source} must be a mapping')
    errors = sorted(_VALIDATOR.iter_errors(raw), key=lambda e: list(e.absolute_path))
    if errors:
        details = '; '.join(
            f"{'.'.join(str(p) for p in err.absolute_path) or '<root>'}: {err.message}"
            for err in errors
        )
        raise ConfigError(f'Invalid configuration in {source}: {details}')
    return cast(dict[str, Any], raw)


def config_from_mapping(raw: dict[str, Any], source: Path | None = None) -> SuiteConfig:
    raw = _validate(raw, source or Path('<memory>'))
    project = cast(dict[str, Any], raw.get('project', {}) or {})
    board = cast(dict[str, Any], raw.get('board', {}) or {})
    sprint = cast(dict[str, Any], raw.get('sprint', {}) or {})
    logging_config = cast(dict[str, Any], raw.get('logging', {}) or {})
    telemetry_config = cast(dict[str, Any], raw.get('telemetry', {}) or {})
    env_auth = cast(dict[str, Any], raw.get('environment', {}) or {})

    board_id = board.get('id')
    return SuiteConfig(
        version=int(raw.get('version', 1)),
        source_file=source,
        server=str(_resolve_env_var(raw.get('server')) or ''),
        login=_resolve_env_var(raw.get('login')),
        auth_type=raw.get('auth_type', 'basic'),
        project_key=str(project.get('key', '') or '').upper(),
        board_id=int(board_id) if board_id is not None else None,
        sprint_state=parse_sprint_state(sprint.get('state')),
        logging_json_enabled=bool(logging_config.get('json_enabled', False)),
        logging_level=logging_config.get('level', 'WARNING'),
        telemetry_enabled=bool(telemetry_config.get('enabled', False)),
        telemetry_store_path=telemetry_config.get('store_path'),
        env_auth_load_dotenv=bool(env_auth.get('load_dotenv', True)),
        env_auth_dotenv_path=env_auth.get('dotenv_path'),
    )


def load_config(path: str | Path) -> SuiteConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f'Configuration file not found: {p}')
    try:
        raw = yaml.safe_load(p.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f'Could not parse {p}: {exc}') from exc
    raw = _validate(raw, p)
    # $VAR references may point at values that only live in a .env file
    env_auth = cast(dict[str, Any], raw.get('environment', {}) or {})
    if env_auth.get('load_dotenv', True):
        load_environment_files(env_auth.get('dotenv_path'))
    return config_from_mapping(raw, p)


__all__ = [
    'ConfigError',
    'SuiteConfig',
    'DEFAULT_CONFIG_FILE',
    'DEFAULT_SPRINT_STATE',
    'config_from_mapping',
    'generate_browse_url',
    'load_config',
    'parse_sprint_state',
]
