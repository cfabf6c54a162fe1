"""Config loading."""

from tradesim.config.loader import compute_config_hash, load_config, serialize_config
from tradesim.config.models import (
    AppConfig,
    DataConfig,
    MonitoringConfig,
    PlaybackConfig,
    StoreConfig,
)

__all__ = [
    "AppConfig",
    "DataConfig",
    "MonitoringConfig",
    "PlaybackConfig",
    "StoreConfig",
    "compute_config_hash",
    "load_config",
    "serialize_config",
]
