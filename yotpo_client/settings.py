from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml
from .exceptions import ConfigError
from .options import parse_additional_headers

CONFIG_PATH = Path('config/yotpo.yaml')

ENV_KEYS = {
    'api_key': 'YOTPO_API_KEY',
    'api_secret': 'YOTPO_API_SECRET',
    'additional_headers': 'YOTPO_ADDITIONAL_HEADERS',
    'timeout': 'YOTPO_TIMEOUT',
    'cache_dir': 'YOTPO_CACHE_DIR',
}


def load_env_file(env_path: Path) -> None:
    """Load ``KEY=value`` lines into the environment, keeping non-empty existing values."""
    if not env_path.exists():
        return
    for line in env_path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        k = k.strip()
        v = v.strip().strip('"').strip("'")
        if not k:
            continue
        existing = os.environ.get(k)
        if existing is None or existing.strip() == '':
            os.environ[k] = v


def load_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open('r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    section = data.get('yotpo', data)
    return dict(section) if isinstance(section, dict) else {}


class YotpoSettings:
    """Read-only Yotpo configuration (api key, secret, additional headers)."""

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(values or {})

    @classmethod
    def load(cls, config_path: Path | str = CONFIG_PATH, env_file: Path | str | None = '.env') -> 'YotpoSettings':
        if env_file:
            load_env_file(Path(env_file))
        values = load_config(Path(config_path))
        for key, env_name in ENV_KEYS.items():
            raw = os.getenv(env_name)
            if raw is None or raw.strip() == '':
                continue
            if key == 'additional_headers':
                values[key] = [h.strip() for h in raw.split(';') if h.strip()]
            else:
                values[key] = raw.strip()
        return cls(values)

    def get(self, key: str, default: Any = None) -> Any:
        value = self._values.get(key)
        return default if value is None else value

    @property
    def api_key(self) -> str:
        return str(self.get('api_key', ''))

    @property
    def api_secret(self) -> str:
        return str(self.get('api_secret', ''))

    @property
    def timeout(self) -> float:
        try:
            return float(self.get('timeout', 30))
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid timeout: {self.get('timeout')!r}") from None

    def additional_headers(self) -> Dict[str, str]:
        entries: List[str] = self.get('additional_headers', []) or []
        if isinstance(entries, str):
            entries = [entries]
        return parse_additional_headers(entries)

    def validate(self) -> None:
        missing = [k for k in ('api_key', 'api_secret') if not str(self.get(k, '')).strip()]
        if missing:
            raise ConfigError('Missing required Yotpo settings: ' + ', '.join(missing) + f" (env {', '.join(ENV_KEYS[k] for k in missing)})")
        self.additional_headers()
        if self.timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {self.timeout}")
