"""Configuration loader: YAML file, schema validation, environment fallback."""

import hashlib
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from src.config.constants import COMPONENT_CONFIG
from src.config.schemas.app import DigestConfig
from src.settings import AppSettings, get_settings


logger = structlog.get_logger()


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details (loc, msg, type).
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


class ConfigLoader:
    """Loads config.yaml into a validated, immutable DigestConfig.

    A missing file is not an error: every key has a default. Secrets left
    empty in the file are filled from the environment.
    """

    def __init__(self, run_id: str, settings: AppSettings | None = None) -> None:
        """Initialize the loader.

        Args:
            run_id: Unique identifier for the current run.
            settings: Environment settings. Read from the process when omitted.
        """
        self._run_id = run_id
        self._settings = settings
        self._file_checksum: str | None = None
        self._log = logger.bind(component=COMPONENT_CONFIG, run_id=run_id)

    @property
    def file_checksum(self) -> str | None:
        """SHA-256 of the loaded file, or None when defaults were used."""
        return self._file_checksum

    def load(self, config_path: Path) -> DigestConfig:
        """Load and validate the configuration file.

        Args:
            config_path: Path to config.yaml.

        Returns:
            Validated configuration with environment fallbacks applied.

        Raises:
            ConfigValidationError: If the file cannot be parsed or validated.
        """
        raw = self._read_yaml(config_path)

        try:
            config = DigestConfig.model_validate(raw)
        except ValidationError as e:
            errors = [
                {
                    "loc": ".".join(str(loc) for loc in err["loc"]),
                    "msg": err["msg"],
                    "type": err["type"],
                }
                for err in e.errors()
            ]
            self._log.error(
                "config_validation_failed",
                file_path=str(config_path),
                validation_error_count=len(errors),
                errors=errors,
            )
            raise ConfigValidationError(errors, str(config_path)) from e

        config = self._apply_env_fallbacks(config)
        self._log.info(
            "config_ready",
            file_path=str(config_path),
            file_sha256=self._file_checksum,
            ai_provider=config.ai.provider.value,
            ai_key_set=bool(config.ai.api_key),
            v2ex_token_set=bool(config.v2ex.token),
        )
        return config

    def _read_yaml(self, config_path: Path) -> dict[str, object]:
        if not config_path.exists():
            self._log.info("config_file_missing", file_path=str(config_path))
            return {}

        content = config_path.read_bytes()
        self._file_checksum = hashlib.sha256(content).hexdigest()
        try:
            parsed = yaml.safe_load(content.decode("utf-8"))
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            self._log.error(
                "config_yaml_parse_error", file_path=str(config_path), error=str(e)
            )
            raise ConfigValidationError(
                [{"loc": "yaml", "msg": str(e), "type": "yaml_parse_error"}],
                str(config_path),
            ) from e

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ConfigValidationError(
                [
                    {
                        "loc": "root",
                        "msg": "Top level of the config file must be a mapping",
                        "type": "mapping_type",
                    }
                ],
                str(config_path),
            )
        return parsed

    def _apply_env_fallbacks(self, config: DigestConfig) -> DigestConfig:
        settings = self._settings or get_settings()
        updates: dict[str, object] = {}

        if not config.ai.api_key:
            key = settings.ai_key_for_provider(config.ai.provider.value)
            if key:
                updates["ai"] = config.ai.model_copy(update={"api_key": key})

        if not config.v2ex.token and settings.v2ex_token:
            updates["v2ex"] = config.v2ex.model_copy(
                update={"token": settings.v2ex_token}
            )

        if not updates:
            return config
        return config.model_copy(update=updates)


def load_config(
    config_path: Path, run_id: str, settings: AppSettings | None = None
) -> DigestConfig:
    """Load config.yaml with environment fallbacks.

    Raises:
        ConfigValidationError: If validation fails.
    """
    return ConfigLoader(run_id, settings).load(config_path)
