from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .base_client import DEFAULT_BASE_URL
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

PROVISIONING_KEY_ENV = 'PROVISIONING_API_KEY'
API_KEY_ENV = 'OPENROUTER_API_KEY'
BASE_URL_ENV = 'OPENROUTER_BASE_URL'


def load_env_file(env_path: Path) -> None:
    """Load KEY=VALUE lines from a local .env file into os.environ.

    Existing non-empty environment values win over the file.
    """
    if not env_path.exists():
        return
    try:
        text = env_path.read_text(encoding='utf-8')
    except OSError as e:
        logger.warning('Could not read %s: %s', env_path, e)
        return
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        k = k.strip()
        if k.startswith('export '):
            k = k[len('export '):].strip()
        v = v.strip().strip('"').strip("'")
        if not k:
            continue
        existing = os.environ.get(k)
        if existing is None or existing.strip() == '':
            os.environ[k] = v


def _non_empty(value: Optional[str]) -> Optional[str]:
    if value is None or value.strip() == '':
        return None
    return value.strip()


@dataclass(frozen=True)
class Settings:
    """Credentials and endpoint for one CLI session."""
    provisioning_api_key: Optional[str] = None
    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        if env_file is not None:
            load_env_file(env_file)
        env = os.environ if environ is None else environ
        return cls(
            provisioning_api_key=_non_empty(env.get(PROVISIONING_KEY_ENV)),
            api_key=_non_empty(env.get(API_KEY_ENV)),
            base_url=_non_empty(env.get(BASE_URL_ENV)) or DEFAULT_BASE_URL,
        )

    def require_provisioning_key(self) -> str:
        if not self.provisioning_api_key:
            raise ConfigurationError(f"The environment variable {PROVISIONING_KEY_ENV} is not set.")
        return self.provisioning_api_key

    def require_api_key(self, override: Optional[str] = None) -> str:
        key = _non_empty(override) or self.api_key
        if not key:
            raise ConfigurationError(f"No API key provided and {API_KEY_ENV} is not set.")
        return key
