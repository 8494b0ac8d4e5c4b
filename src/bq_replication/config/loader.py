"""
Configuration loading for the replication system.

Reads the YAML run configuration and sling load-job templates and validates
them against the Pydantic models.
"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import ValidationError

from bq_replication.config.models import LoadJobTemplate, ReplicationSystemConfig
from bq_replication.core.exceptions import ConfigurationError


class ConfigLoader:
    """Loads and validates configuration files."""

    @staticmethod
    def _read_yaml(path: Union[str, Path]) -> Dict[str, Any]:
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigurationError(f"Failed to read {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a YAML mapping")
        return data

    @classmethod
    def load_from_dict(cls, data: Dict[str, Any]) -> ReplicationSystemConfig:
        """Validate an already parsed configuration mapping."""
        try:
            return ReplicationSystemConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def load_from_file(cls, path: Union[str, Path]) -> ReplicationSystemConfig:
        """
        Load the run configuration.

        Args:
            path: Path to the YAML configuration file

        Returns:
            Validated, immutable ReplicationSystemConfig

        Raises:
            ConfigurationError: If the file can't be read or fails validation
        """
        return cls.load_from_dict(cls._read_yaml(path))

    @classmethod
    def load_load_job_template(cls, path: Union[str, Path]) -> LoadJobTemplate:
        """
        Load a sling task file used as the load-job template of a source.

        Args:
            path: Path to the sling task YAML (or JSON) file

        Returns:
            Validated LoadJobTemplate

        Raises:
            ConfigurationError: If the file can't be read or fails validation
        """
        data = cls._read_yaml(path)
        try:
            return LoadJobTemplate.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid load-job template {path}: {e}") from e
