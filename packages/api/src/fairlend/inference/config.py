"""Model endpoint configuration loader.

Reads config/models.yaml, substitutes ${ENV_VAR:-default} placeholders,
validates required fields, and supports mtime-based hot-reload so config
changes take effect without restarting the server.

Missing files, missing fields and empty credentials surface as
ConfigurationError so the decision service can fail before any network call.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from ..core.errors import ConfigurationError

# Load .env into os.environ so YAML ${VAR} placeholders resolve correctly.
# pydantic-settings reads .env into its Settings object but doesn't set
# os.environ; the YAML config loader needs actual env vars.
load_dotenv()

logger = logging.getLogger(__name__)

_CONFIG_PATH = Path(
    os.environ.get("MODEL_CONFIG_PATH")
    or Path(__file__).resolve().parents[5] / "config" / "models.yaml"
)
_cached_config: dict[str, Any] | None = None
_cached_mtime: float = 0.0

_ENV_VAR_PATTERN = re.compile(r"\$\{(\w+)(?::-(.*?))?\}")

REQUIRED_MODEL_FIELDS = {"provider", "model_name", "endpoint"}

DECISION_TIER = "decision"


def _substitute_env_vars(value: str) -> str:
    """Replace ${VAR:-default} patterns with environment values."""

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        default = match.group(2) or ""
        return os.environ.get(var_name, default)

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _resolve_env_vars(obj: Any) -> Any:
    """Recursively resolve env var placeholders in a config tree."""
    if isinstance(obj, str):
        return _substitute_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _resolve_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_resolve_env_vars(item) for item in obj]
    return obj


def _validate_config(config: dict[str, Any]) -> None:
    """Validate that every model definition carries the required fields."""
    models = config.get("models") if isinstance(config, dict) else None
    if not models or not isinstance(models, dict):
        raise ConfigurationError("models.yaml must contain a 'models' section with at least one model")

    for name, model in models.items():
        if not isinstance(model, dict):
            raise ConfigurationError(f"Model '{name}' must be a mapping")
        missing = {f for f in REQUIRED_MODEL_FIELDS if not model.get(f)}
        if missing:
            raise ConfigurationError(f"Model '{name}' is missing required fields: {sorted(missing)}")


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load and validate models.yaml from disk."""
    config_path = path or _CONFIG_PATH
    if not config_path.exists():
        raise ConfigurationError(f"Model config not found: {config_path}")

    raw = config_path.read_text()
    config = yaml.safe_load(raw)
    config = _resolve_env_vars(config)
    _validate_config(config)
    return config


def get_config(path: Path | None = None) -> dict[str, Any]:
    """Return cached config, reloading if the file's mtime has changed."""
    global _cached_config, _cached_mtime  # noqa: PLW0603
    config_path = path or _CONFIG_PATH

    try:
        current_mtime = config_path.stat().st_mtime
    except FileNotFoundError:
        if _cached_config is not None:
            logger.warning("Config file disappeared, using cached config")
            return _cached_config
        raise ConfigurationError(f"Model config not found: {config_path}") from None

    if _cached_config is None or current_mtime > _cached_mtime:
        logger.info("Loading model config from %s", config_path)
        _cached_config = load_config(config_path)
        _cached_mtime = current_mtime

        # Invalidate cached HTTP clients so they pick up new endpoints/keys
        from .client import clear_client_cache

        clear_client_cache()

    return _cached_config


def get_model_config(tier: str = DECISION_TIER, path: Path | None = None) -> dict[str, Any]:
    """Return config for a model tier, requiring a non-empty API key."""
    config = get_config(path)
    models = config["models"]
    if tier not in models:
        raise ConfigurationError(f"Unknown model tier '{tier}'. Available: {list(models.keys())}")
    model_cfg = models[tier]
    if not model_cfg.get("api_key"):
        raise ConfigurationError(f"No API key configured for model tier '{tier}' (set LLM_API_KEY)")
    return model_cfg


def log_inference_status() -> None:
    """Log whether the decision model is usable. Call at startup."""
    try:
        model_cfg = get_model_config(DECISION_TIER)
    except ConfigurationError as exc:
        logger.warning("Decision model: NOT CONFIGURED (%s)", exc.detail)
        return
    logger.warning(
        "Decision model: ACTIVE (model=%s, endpoint=%s)",
        model_cfg["model_name"],
        model_cfg["endpoint"],
    )
