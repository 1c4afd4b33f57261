"""
Configuration — loads settings from .codemod-learn.yaml, environment
variables, and built-in defaults (in that priority order: CLI args > env >
YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "learn_api_url": "https://backend.codemod.com",
    "studio_url": "https://codemod.com/studio",
    "engine": "jscodeshift",
    "strategy": "hunks",
    "matching": "position",
    "max_workers": 4,
    "request_timeout": 30.0,
    "max_retries": 3,
    "retry_delay": 1.0,
    "extensions": [".js", ".jsx", ".ts", ".tsx"],
    "log_dir": ".codemod-learn/logs",
}

# Config file search locations
_CONFIG_FILENAMES = [".codemod-learn.yaml", ".codemod-learn.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    # Search CWD first, then home directory
    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


def _normalize_extensions(value) -> list[str]:
    if isinstance(value, str):
        value = value.replace(",", " ").split()
    if not isinstance(value, list):
        return list(_DEFAULTS["extensions"])
    exts = []
    for ext in value:
        ext = str(ext).strip().lower()
        if ext:
            exts.append(ext if ext.startswith(".") else f".{ext}")
    return exts


class Config:
    """Application configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables
    3. .codemod-learn.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return _DEFAULTS[yaml_key]

        self.LEARN_API_URL = _get("CODEMOD_LEARN_API_URL", "learn_api_url").rstrip("/")
        self.STUDIO_URL = _get("CODEMOD_STUDIO_URL", "studio_url")
        self.ENGINE = _get("CODEMOD_ENGINE", "engine")

        self.STRATEGY = _get("CODEMOD_LEARN_STRATEGY", "strategy")
        self.MATCHING = _get("CODEMOD_LEARN_MATCHING", "matching")
        self.MAX_WORKERS = _get("CODEMOD_LEARN_MAX_WORKERS", "max_workers", cast=int)

        self.REQUEST_TIMEOUT = _get("CODEMOD_LEARN_TIMEOUT", "request_timeout",
                                    cast=float)
        self.MAX_RETRIES = _get("CODEMOD_LEARN_MAX_RETRIES", "max_retries", cast=int)
        self.RETRY_DELAY = _get("CODEMOD_LEARN_RETRY_DELAY", "retry_delay",
                                cast=float)

        env_exts = os.getenv("CODEMOD_LEARN_EXTENSIONS")
        self.EXTENSIONS: list[str] = _normalize_extensions(
            env_exts if env_exts is not None
            else yd.get("extensions", _DEFAULTS["extensions"])
        )

        self.LOG_DIR = _get("CODEMOD_LEARN_LOG_DIR", "log_dir")

    def accepts(self, path: str) -> bool:
        """Return True if *path* has one of the configured extensions."""
        return os.path.splitext(path)[1].lower() in self.EXTENSIONS

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
