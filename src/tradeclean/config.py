"""Layered run configuration.

Packaged defaults (``defaults.yaml``) are loaded first and an optional
external YAML or JSON file is deep-merged over them. The merged mapping is
then validated into frozen dataclasses before the pipeline starts.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from importlib import resources
from pathlib import Path
from typing import Any, Mapping

import yaml

from tradeclean.errors import ConfigLoadError

logger = logging.getLogger(__name__)

DEFAULTS_RESOURCE = "defaults.yaml"


@dataclass(frozen=True)
class ReadConfig:
    """Input file locations."""

    symbols_ref_file: Path
    fills_file: Path
    trades_file: Path

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> ReadConfig:
        return cls(
            symbols_ref_file=_required_path(payload, "read-config", "symbols-ref-file"),
            fills_file=_required_path(payload, "read-config", "fills-file"),
            trades_file=_required_path(payload, "read-config", "trades-file"),
        )

    def inputs(self) -> dict[str, Path]:
        return {
            "symbols-ref-file": self.symbols_ref_file,
            "fills-file": self.fills_file,
            "trades-file": self.trades_file,
        }


@dataclass(frozen=True)
class WriteConfig:
    """Output file locations; the summary workbook is optional."""

    cleaned_trades_file: Path
    exceptions_report_file: Path
    summary_workbook_file: Path | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> WriteConfig:
        workbook = payload.get("summary-workbook-file")
        return cls(
            cleaned_trades_file=_required_path(
                payload, "write-config", "cleaned-trades-file"
            ),
            exceptions_report_file=_required_path(
                payload, "write-config", "exceptions-report-file"
            ),
            summary_workbook_file=Path(str(workbook)) if workbook else None,
        )


@dataclass(frozen=True)
class ValidationConfig:
    price_discrepancy_threshold: Decimal

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> ValidationConfig:
        raw = payload.get("price-discrepancy-threshold")
        if raw is None or not str(raw).strip():
            raise ConfigLoadError(
                "Missing required key: validation-config.price-discrepancy-threshold"
            )
        try:
            threshold = Decimal(str(raw).strip())
        except InvalidOperation as e:
            raise ConfigLoadError(
                f"Invalid price-discrepancy-threshold: {raw!r}"
            ) from e
        if not threshold.is_finite() or threshold < 0:
            raise ConfigLoadError(
                f"price-discrepancy-threshold must be a non-negative number: {raw!r}"
            )
        return cls(price_discrepancy_threshold=threshold)


@dataclass(frozen=True)
class AppConfig:
    read: ReadConfig
    write: WriteConfig
    validation: ValidationConfig

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> AppConfig:
        return cls(
            read=ReadConfig.from_mapping(_section(payload, "read-config")),
            write=WriteConfig.from_mapping(_section(payload, "write-config")),
            validation=ValidationConfig.from_mapping(
                _section(payload, "validation-config")
            ),
        )


def _section(payload: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    block = payload.get(name)
    if not isinstance(block, Mapping):
        raise ConfigLoadError(f"Missing or invalid config section: {name}")
    return block


def _required_path(payload: Mapping[str, Any], section: str, key: str) -> Path:
    value = payload.get(key)
    if value is None or not str(value).strip():
        raise ConfigLoadError(f"Missing required key: {section}.{key}")
    return Path(str(value).strip())


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated with ``override``, merging nested mappings."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_mapping(path: Path) -> Mapping[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigLoadError(f"Failed to read config file {path}") from e
    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigLoadError(f"Failed to parse config file {path}") from e
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigLoadError(f"Config file {path} must map keys to values")
    return data


def load_defaults() -> dict[str, Any]:
    text = resources.files("tradeclean").joinpath(DEFAULTS_RESOURCE).read_text(
        encoding="utf-8"
    )
    return dict(yaml.safe_load(text) or {})


def check_inputs_exist(config: AppConfig) -> None:
    for key, path in config.read.inputs().items():
        if not path.is_file():
            raise ConfigLoadError(f"Input file for {key} not found: {path}")


def load_config(
    path: str | Path | None = None, *, check_inputs: bool = True
) -> AppConfig:
    """Load defaults, overlay ``path`` if given, validate and return AppConfig."""
    payload = load_defaults()
    if path is not None:
        path = Path(path)
        if not path.is_file():
            raise ConfigLoadError(f"Configuration file not found: {path}")
        logger.info("Loading external configuration from %s", path)
        payload = deep_merge(payload, _load_mapping(path))
    else:
        logger.info("No config file provided; using built-in defaults")

    config = AppConfig.from_mapping(payload)
    if check_inputs:
        check_inputs_exist(config)
    logger.info("Configuration loaded successfully")
    logger.debug("Loaded config: %s", config)
    return config
