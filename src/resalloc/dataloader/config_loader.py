# src/resalloc/dataloader/config_loader.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from resalloc.errors import ConfigError
from resalloc.schemas.models import Config

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


class ConfigLoader:
    """
    @brief
    Reads config.yaml into a validated Config.

    @details
    Every failure mode (missing file, wrong extension, YAML syntax, empty
    file, non-mapping root, schema violation) surfaces as ConfigError with a
    source and a suggested action. Relative input paths are resolved against
    the directory holding the config file so a config can travel with its
    data.
    """

    def load(self, path: Path | str | None) -> Config:
        """
        @brief
        Load and validate configuration.

        @params
            path : Path | str | None
                Path to a .yaml/.yml file; None yields the default Config().

        @returns
            Validated Config instance.

        @raises
            ConfigError
                On any I/O, syntax or schema problem.
        """
        if path is None:
            logger.info("No config file given, using defaults")
            return Config()

        path = Path(path)
        data = self._read_yaml(path)
        cfg = self._validate(data)
        self._resolve_inputs(cfg, path.parent)
        logger.info("Config loaded from %s", path)
        return cfg

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        source = "ConfigLoader._read_yaml"
        if not path.is_file():
            raise ConfigError(
                message=f"Configuration file not found: {path}",
                source=source,
                suggested_action="Pass --config pointing to an existing config.yaml.",
            )
        if path.suffix.lower() not in _YAML_SUFFIXES:
            raise ConfigError(
                message=f"Invalid configuration file extension: {path.suffix or '<none>'}",
                source=source,
                suggested_action="Rename the file to .yaml or .yml.",
            )

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                message=f"YAML parsing failed: {e}",
                source=source,
                suggested_action="Fix YAML syntax/indentation.",
            ) from e
        except OSError as e:
            raise ConfigError(
                message=f"Unable to read configuration file: {e}",
                source=source,
                suggested_action="Check file permissions.",
            ) from e

        if data is None:
            raise ConfigError(
                message="Configuration file is empty.",
                source=source,
                suggested_action="Add at least one block (validation, report, inputs).",
            )
        if not isinstance(data, Mapping):
            raise ConfigError(
                message="Configuration root must be a mapping (key: value pairs).",
                source=source,
                suggested_action="Use top-level keys such as 'validation:' and 'report:'.",
            )
        return dict(data)

    def _validate(self, data: dict[str, Any]) -> Config:
        try:
            return Config.model_validate(data)
        except ValidationError as e:
            raise ConfigError(
                message=f"Invalid configuration structure: {e}",
                source="ConfigLoader._validate",
                suggested_action=(
                    "Check field names, types and bounds. Unknown keys are rejected."
                ),
            ) from e

    def _resolve_inputs(self, cfg: Config, base_dir: Path) -> None:
        # Absolute paths and unset entries are left untouched
        for name in ("clients", "workers", "tasks"):
            value = getattr(cfg.inputs, name)
            if value and not Path(value).is_absolute():
                setattr(cfg.inputs, name, str(base_dir / value))


__all__ = ["ConfigLoader"]
