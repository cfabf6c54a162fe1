"""Configuration models for simulation runs."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PlaybackConfig:
    frame_rate: int = 30
    visible_candle_count: int = 100
    default_speed: float = 1.0
    speed_options: tuple[float, ...] = (1.0, 2.0, 5.0, 10.0)
    autoplay: bool = False
    enforce_live_end_time: bool = False


@dataclass(frozen=True)
class DataConfig:
    candle_dir: str = "data/candles"
    interval: str = "1m"
    default_exchange: str = "binance"


@dataclass(frozen=True)
class StoreConfig:
    path: str = "runtime/simulations.json"


@dataclass(frozen=True)
class MonitoringConfig:
    audit_log_path: str = "runtime/audit.log"


@dataclass(frozen=True)
class AppConfig:
    name: str
    version: str
    run_id_prefix: str
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    data: DataConfig = field(default_factory=DataConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)
