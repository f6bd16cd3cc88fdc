"""Processor configuration management."""

import os
from functools import lru_cache
from pathlib import Path

from .schemas import ProcessorConfig
from .utils import load_json

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / 'config' / 'processor_config.json'


@lru_cache(maxsize=4)
def get_config(path: str | Path | None = None) -> ProcessorConfig:
    """
    Load processor configuration.

    The path is resolved from the argument, then the GOLFLEAGUE_CONFIG
    environment variable, then config/processor_config.json. Built-in
    defaults are used when no file exists at the resolved path.

    Configuration is cached after first load.

    Raises:
        ValueError: If the config file has invalid structure

    Example:
        from golfleague.config import get_config
        config = get_config()
        print(f"Canonical time zone: {config.timezone}")
    """
    resolved = Path(path or os.environ.get('GOLFLEAGUE_CONFIG') or DEFAULT_CONFIG_PATH)
    if not resolved.exists():
        return ProcessorConfig()
    return load_json(resolved, schema=ProcessorConfig)


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime
    and you need to reload it.
    """
    get_config.cache_clear()
