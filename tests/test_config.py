import json
from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from tradeclean.config import AppConfig, deep_merge, load_config, load_defaults
from tradeclean.errors import ConfigLoadError


def test_defaults_are_packaged():
    defaults = load_defaults()
    config = AppConfig.from_mapping(defaults)
    assert config.read.trades_file == Path("data/trades.csv")
    assert config.write.cleaned_trades_file == Path("output/cleaned_trades.json")
    assert config.write.summary_workbook_file is None
    assert config.validation.price_discrepancy_threshold == Decimal("0.01")


def test_deep_merge_keeps_unrelated_keys():
    base = {"a": {"x": 1, "y": 2}, "b": 3}
    merged = deep_merge(base, {"a": {"y": 20}, "c": 4})
    assert merged == {"a": {"x": 1, "y": 20}, "b": 3, "c": 4}
    assert base["a"]["y"] == 2


def test_yaml_file_overrides_defaults(tmp_path, write_inputs):
    payload = write_inputs(threshold="0.05")
    path = tmp_path / "recon.yaml"
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")

    config = load_config(path)

    assert config.validation.price_discrepancy_threshold == Decimal("0.05")
    assert config.read.trades_file == Path(payload["read-config"]["trades-file"])


def test_json_file_partial_override(tmp_path):
    path = tmp_path / "recon.json"
    path.write_text(
        json.dumps({"validation-config": {"price-discrepancy-threshold": 0.5}}),
        encoding="utf-8",
    )

    config = load_config(path, check_inputs=False)

    assert config.validation.price_discrepancy_threshold == Decimal("0.5")
    assert config.read.fills_file == Path("data/counterparty_fills.csv")


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigLoadError, match="Configuration file not found"):
        load_config(tmp_path / "nope.yaml")


def test_malformed_config_file(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigLoadError, match="Failed to parse"):
        load_config(path, check_inputs=False)


def test_non_mapping_config_file(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigLoadError):
        load_config(path, check_inputs=False)


def test_blank_required_key(tmp_path):
    path = tmp_path / "recon.yaml"
    path.write_text("read-config:\n  trades-file: ''\n", encoding="utf-8")
    with pytest.raises(ConfigLoadError, match="read-config.trades-file"):
        load_config(path, check_inputs=False)


@pytest.mark.parametrize("threshold", ["-0.01", "abc", "NaN"])
def test_invalid_threshold(tmp_path, threshold):
    path = tmp_path / "recon.json"
    path.write_text(
        json.dumps({"validation-config": {"price-discrepancy-threshold": threshold}}),
        encoding="utf-8",
    )
    with pytest.raises(ConfigLoadError):
        load_config(path, check_inputs=False)


def test_missing_input_file_is_detected(tmp_path, write_inputs):
    payload = write_inputs()
    Path(payload["read-config"]["fills-file"]).unlink()
    path = tmp_path / "recon.yaml"
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")

    with pytest.raises(ConfigLoadError, match="fills-file"):
        load_config(path)
