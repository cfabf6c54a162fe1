"""Load configuration files."""

from __future__ import annotations

import hashlib
from dataclasses import asdict
from pathlib import Path
from typing import Any

import yaml

from tradesim.config.models import (
    AppConfig,
    DataConfig,
    MonitoringConfig,
    PlaybackConfig,
    StoreConfig,
)


def load_config(path: str | Path) -> AppConfig:
    path = Path(path)
    data = _load_yaml(path)

    name = str(_require(data, "name"))
    version = str(_require(data, "version"))
    run_id_prefix = str(data.get("run_id_prefix", name))

    return AppConfig(
        name=name,
        version=version,
        run_id_prefix=run_id_prefix,
        playback=_parse_playback(data.get("playback") or {}),
        data=_parse_data(data.get("data") or {}),
        store=_parse_store(data.get("store") or {}),
        monitoring=_parse_monitoring(data.get("monitoring") or {}),
    )


def compute_config_hash(path: str | Path) -> str:
    path = Path(path)
    return hashlib.sha256(path.read_bytes()).hexdigest()


def serialize_config(config: AppConfig) -> dict[str, Any]:
    payload = asdict(config)
    payload["playback"]["speed_options"] = list(config.playback.speed_options)
    return payload


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Config must be a mapping")
    return data


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise ValueError(f"Missing required config key: {key}")
    return data[key]


def _parse_playback(data: dict[str, Any]) -> PlaybackConfig:
    frame_rate = int(data.get("frame_rate", 30))
    if frame_rate <= 0:
        raise ValueError(f"Invalid playback.frame_rate: {frame_rate}")
    visible = int(data.get("visible_candle_count", 100))
    if visible <= 0:
        raise ValueError(f"Invalid playback.visible_candle_count: {visible}")
    default_speed = float(data.get("default_speed", 1.0))
    if default_speed <= 0:
        raise ValueError(f"Invalid playback.default_speed: {default_speed}")
    speed_options = tuple(float(value) for value in data.get("speed_options", (1, 2, 5, 10)))
    if not speed_options or any(value <= 0 for value in speed_options):
        raise ValueError(f"Invalid playback.speed_options: {list(speed_options)}")
    if default_speed not in speed_options:
        raise ValueError(f"playback.default_speed {default_speed} is not one of playback.speed_options")
    return PlaybackConfig(
        frame_rate=frame_rate,
        visible_candle_count=visible,
        default_speed=default_speed,
        speed_options=speed_options,
        autoplay=bool(data.get("autoplay", False)),
        enforce_live_end_time=bool(data.get("enforce_live_end_time", False)),
    )


def _parse_data(data: dict[str, Any]) -> DataConfig:
    return DataConfig(
        candle_dir=str(data.get("candle_dir", "data/candles")),
        interval=str(data.get("interval", "1m")),
        default_exchange=str(data.get("default_exchange", "binance")),
    )


def _parse_store(data: dict[str, Any]) -> StoreConfig:
    return StoreConfig(path=str(data.get("path", "runtime/simulations.json")))


def _parse_monitoring(data: dict[str, Any]) -> MonitoringConfig:
    return MonitoringConfig(
        audit_log_path=str(data.get("audit_log_path", "runtime/audit.log")),
    )
