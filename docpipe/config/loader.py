"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. ``config/config.yaml``: static defaults checked into the repo
  2. ``.env`` file: local developer overrides (not committed)
  3. Environment variables: set at deploy time

:func:`load_config` reads the YAML file first, then deep-merges the
environment-derived values from :class:`Settings` on top.
"""

from pathlib import Path

import yaml

from docpipe.config.settings import Settings

_DEFAULT_CHUNKING = {
    "chunk_size": 500,
    "overlap": 50,
    "strategy": "characters",
    "embedding_model": "openai",
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Pre-built settings; a fresh :class:`Settings` is read when omitted.

    Returns:
        Fully resolved configuration dictionary.  The ``chunking`` section is
        always present, falling back to built-in defaults.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "embedding": {
            "openai_model": settings.openai_embedding_model,
            "available_providers": settings.get_available_embedding_providers(),
        },
        "vector_store": {
            "index_host": settings.pinecone_index_host,
            "timeout_seconds": settings.pinecone_timeout_seconds,
        },
        "processing": {
            "timeout_seconds": settings.process_timeout_seconds,
            "max_upload_bytes": settings.max_upload_bytes,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    resolved = {"chunking": dict(_DEFAULT_CHUNKING)}
    _deep_merge(resolved, yaml_config)
    _deep_merge(resolved, env_overrides)
    return resolved


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
