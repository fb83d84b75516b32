"""YAML configuration loader with environment variable overrides."""

import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml
from pydantic import ValidationError

from .models import ProviderConfig, SweepConfig, TfawsConfig

DEFAULT_CONFIG_FILE = "tfaws.yaml"


class ConfigValidationError(Exception):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, errors: Optional[List[Dict]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.errors:
            return self.message

        error_lines = [self.message, ""]
        for error in self.errors:
            location = " -> ".join(str(loc) for loc in error.get("loc", []))
            msg = error.get("msg", "Unknown error")
            error_lines.append(f"  - {location}: {msg}")

        return "\n".join(error_lines)


class Config:
    """Loads tfaws.yaml, applies environment overrides and validates it once."""

    def __init__(self, config_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to the YAML file. A missing default file is
                treated as empty; a missing explicit file is an error.
            environ: Environment mapping, defaults to os.environ
        """
        self.explicit_path = config_path is not None
        self.config_path = Path(config_path or DEFAULT_CONFIG_FILE)
        self.environ = os.environ if environ is None else environ
        self.data: Dict = {}
        self.provider: ProviderConfig = ProviderConfig()
        self.sweep: SweepConfig = SweepConfig()

    def load(self) -> "Config":
        """Load and validate configuration.

        Returns:
            Self for method chaining

        Raises:
            ConfigValidationError: If configuration is invalid
            FileNotFoundError: If an explicitly named file doesn't exist
        """
        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    self.data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigValidationError(f"Failed to parse YAML: {e}")
        elif self.explicit_path:
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        if not isinstance(self.data, dict):
            raise ConfigValidationError("Configuration root must be a mapping")

        self._apply_environment()

        try:
            parsed = TfawsConfig(**self.data)
        except ValidationError as e:
            raise ConfigValidationError(
                f"Configuration validation failed with {e.error_count()} error(s)",
                [{"loc": list(error["loc"]), "msg": error["msg"]} for error in e.errors()],
            )

        self.provider = parsed.provider
        self.sweep = parsed.sweep
        return self

    def _apply_environment(self) -> None:
        """Overlay AWS_* and SWEEP* environment variables onto the file data."""
        provider = dict(self.data.get("provider") or {})
        sweep = dict(self.data.get("sweep") or {})

        region = self.environ.get("AWS_REGION") or self.environ.get("AWS_DEFAULT_REGION")
        if region:
            provider["region"] = region
        if self.environ.get("AWS_PROFILE"):
            provider["profile"] = self.environ["AWS_PROFILE"]

        regions = self.environ.get("SWEEP_REGIONS") or self.environ.get("SWEEP")
        if regions:
            sweep["regions"] = regions.split(",")
        if self.environ.get("SWEEP_RUN"):
            sweep["sweepers"] = self.environ["SWEEP_RUN"].split(",")
        if self.environ.get("SWEEP_ALLOW_FAILURES"):
            sweep["allow_failures"] = self.environ["SWEEP_ALLOW_FAILURES"].lower() in ("1", "true", "yes")

        if provider:
            self.data["provider"] = provider
        if sweep:
            self.data["sweep"] = sweep

    def to_dict(self) -> Dict:
        return {
            "provider": self.provider.model_dump(),
            "sweep": self.sweep.model_dump(),
        }
