import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from .json_store import load_json


DEFAULT_DATA_DIR = "data"
DATA_DIR_ENV = "YURCOIN_DATA_DIR"
TOKEN_ENV = "BOT_TOKEN"
TOKEN_FILE = "token.env"
SETTINGS_FILE = "bot_config.json"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "logging": {"dir": "logs", "level": "INFO"},
    "http": {"host": "0.0.0.0", "port": 8080, "verbose": False},
    "telegram": {
        "api_base": "https://api.telegram.org",
        "poll_timeout_s": 30,
        "max_workers": 8,
    },
}

_ENV_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


class MissingTokenError(RuntimeError):
    pass


def expand_env(s: Any, env: Optional[Mapping[str, str]] = None) -> Any:
    """Expand ${VARS} inside strings (missing vars -> ""). Recurses into dicts/lists."""
    env = os.environ if env is None else env
    if isinstance(s, str):
        return _ENV_RE.sub(lambda m: env.get(m.group(1), ""), s)
    if isinstance(s, dict):
        return {k: expand_env(v, env) for k, v in s.items()}
    if isinstance(s, list):
        return [expand_env(v, env) for v in s]
    return s


def resolve_data_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if env is None else env
    d = str(env.get(DATA_DIR_ENV, "") or "").strip()
    if d:
        return Path(d)
    return Path(DEFAULT_DATA_DIR)


def load_settings(data_dir: Path, env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Merge <data>/bot_config.json onto DEFAULT_SETTINGS, one section at a time."""
    raw = load_json(data_dir / SETTINGS_FILE, {})
    if not isinstance(raw, dict):
        raw = {}
    raw = expand_env(raw, env)

    out: Dict[str, Any] = {}
    for section, defaults in DEFAULT_SETTINGS.items():
        merged = dict(defaults)
        user = raw.get(section)
        if isinstance(user, dict):
            merged.update(user)
        out[section] = merged
    return out


def _is_valid_token(token: Any) -> bool:
    return isinstance(token, str) and bool(token.strip())


def load_bot_token(data_dir: Path, env: Optional[Mapping[str, str]] = None) -> str:
    """BOT_TOKEN from the environment, else the first line of <data>/token.env.

    When `env` is not given, token.env is also fed through python-dotenv so a
    `BOT_TOKEN=...` line lands in os.environ (existing vars win).
    """
    token_path = data_dir / TOKEN_FILE
    if env is None:
        load_dotenv(token_path, override=False)
        env = os.environ

    token = env.get(TOKEN_ENV)
    if _is_valid_token(token):
        return token.strip()

    try:
        lines = token_path.read_text(encoding="utf-8").splitlines()
    except OSError:
        lines = []
    if lines and _is_valid_token(lines[0]):
        return lines[0].strip()

    raise MissingTokenError(f"{TOKEN_ENV} not set and {TOKEN_FILE} is missing or empty")
