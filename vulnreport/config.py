"""Configuration file support for vulnreport (.vulnreport.yml)."""

from dataclasses import dataclass
from pathlib import Path

import yaml

from vulnreport.scoring import SeverityRank

DEFAULT_CONFIG_NAME = ".vulnreport.yml"
TIME_FORMATS = ("string", "native")


@dataclass
class Config:
    """vulnreport configuration loaded from .vulnreport.yml."""

    time_format: str = "string"
    indent: int | None = 2
    severity_threshold: str = "NONE"

    @property
    def min_severity(self) -> SeverityRank:
        return SeverityRank(self.severity_threshold)


def load_config(config_path: str | None = None, project_root: str | None = None) -> Config:
    """Load configuration, falling back to defaults when no file applies.

    An explicit config path must exist. Otherwise .vulnreport.yml in the
    project root is used if present.
    """
    path = _find_config(config_path, project_root)
    if path is None:
        return Config()

    try:
        raw = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    return _parse_config(raw, source=path)


def _find_config(config_path: str | None, project_root: str | None) -> Path | None:
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return path
    if project_root:
        candidate = Path(project_root) / DEFAULT_CONFIG_NAME
        if candidate.exists():
            return candidate
    return None


def _parse_config(raw: object, source: Path) -> Config:
    """Validate a loaded YAML document into a Config. An empty document means defaults."""
    config = Config()
    if raw is None:
        return config
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {source} must be a YAML mapping, got {type(raw).__name__}")

    if "time_format" in raw:
        fmt = raw["time_format"]
        if fmt not in TIME_FORMATS:
            raise ValueError(f"time_format must be one of {TIME_FORMATS}, got '{fmt}'")
        config.time_format = fmt

    if "indent" in raw:
        val = raw["indent"]
        if val is not None and (isinstance(val, bool) or not isinstance(val, int) or val < 0):
            raise ValueError("indent must be a non-negative integer or null")
        config.indent = val

    if "severity_threshold" in raw:
        sev = raw["severity_threshold"]
        valid = {s.value for s in SeverityRank}
        if sev not in valid:
            raise ValueError(f"severity_threshold must be one of {valid}, got '{sev}'")
        config.severity_threshold = sev

    return config
