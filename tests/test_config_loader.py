from pathlib import Path

import pytest

yaml = pytest.importorskip("yaml")

from tradesim.config import compute_config_hash, load_config, serialize_config
from tradesim.runtime import create_run_context


CONFIG_PATH = Path(__file__).resolve().parents[1] / "configs" / "tradesim.yaml"


def test_load_config_sample():
    config = load_config(CONFIG_PATH)

    assert config.name == "tradesim"
    assert config.playback.frame_rate == 30
    assert config.playback.visible_candle_count == 100
    assert config.playback.speed_options == (1.0, 2.0, 5.0, 10.0)
    assert config.data.interval == "1m"
    assert serialize_config(config)["playback"]["speed_options"] == [1.0, 2.0, 5.0, 10.0]


def test_defaults_for_missing_sections(tmp_path):
    path = tmp_path / "minimal.yaml"
    path.write_text("name: mini\nversion: 2\n", encoding="utf-8")

    config = load_config(path)

    assert config.run_id_prefix == "mini"
    assert config.version == "2"
    assert config.playback.default_speed == 1.0
    assert config.store.path == "runtime/simulations.json"


def test_missing_required_key(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("version: 1\n", encoding="utf-8")

    with pytest.raises(ValueError, match="name"):
        load_config(path)


def test_invalid_frame_rate(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("name: x\nversion: 1\nplayback:\n  frame_rate: 0\n", encoding="utf-8")

    with pytest.raises(ValueError, match="frame_rate"):
        load_config(path)


def test_default_speed_must_be_a_speed_option(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text(
        "name: x\nversion: 1\nplayback:\n  default_speed: 3\n  speed_options: [1, 2, 5]\n",
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="speed_options"):
        load_config(path)


def test_empty_speed_options_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("name: x\nversion: 1\nplayback:\n  speed_options: []\n", encoding="utf-8")

    with pytest.raises(ValueError, match="speed_options"):
        load_config(path)


def test_run_context_uses_config_hash():
    context = create_run_context(CONFIG_PATH, "replay", simulation_id="sim-1")

    assert context.config_hash == compute_config_hash(CONFIG_PATH)
    assert context.run_id.startswith("replay-sim-1-")
    assert context.run_id.endswith(context.config_hash[:8])


def test_run_context_audit_log_is_stamped(tmp_path):
    context = create_run_context(CONFIG_PATH, "replay", simulation_id="sim-1")
    audit = context.audit_log(tmp_path / "audit.log")

    audit.log("simulation_started", {"simulation_id": "sim-1"})

    record = audit.read()[0]
    assert context.simulation_id == "sim-1"
    assert record["run_id"] == context.run_id
    assert record["config_hash"] == context.config_hash
