"""
Configuration schema and loading for dagdemo.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

# Environment variable that points the CLI at an optional YAML settings file.
# The CLI itself only exposes -o, so this is the one way to pass a file.
SETTINGS_FILE_ENV = "DAGDEMO_SETTINGS_FILE"


class SimNetSettings(BaseModel):
    """Simulated node backend configuration.

    Example YAML:
        simnet:
          seed: 7
          max_parents: 3
          block_interval_ms: 2
    """

    model_config = {"frozen": True, "extra": "forbid"}

    seed: int | None = Field(
        default=None,
        description="Seed for parent selection; None draws a fresh seed per run",
    )
    max_parents: int = Field(
        default=3,
        ge=1,
        description="Maximum number of tips a newly mined block references",
    )
    block_interval_ms: int = Field(
        default=1,
        ge=0,
        description="Pause between blocks mined on one node (lets concurrent miners interleave)",
    )


class DagDemoSettings(BaseModel):
    """Top-level settings for a dagdemo run.

    Defaults reproduce the stock demo: 4 nodes, 50 blocks each.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    node_count: int = Field(default=4, ge=1, description="Number of nodes to provision")
    block_count: int = Field(default=50, ge=1, description="Blocks to generate on each node")
    title: str = Field(default="dag", min_length=1, description="Title of the rendered HTML document")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    json_logs: bool = Field(default=False, description="Emit structured JSON logs")
    simnet: SimNetSettings = Field(default_factory=SimNetSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        """Accept lower-case level names from environment variables."""
        if isinstance(value, str):
            return value.upper()
        return value


def load_settings(config_path: Path | None = None) -> DagDemoSettings:
    """Load settings from an optional YAML file with environment overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (DAGDEMO_*) - highest priority
    2. Config file, if given
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: DAGDEMO_SIMNET__SEED for nested keys.

    Args:
        config_path: Path to YAML configuration file, or None for env-only

    Returns:
        Validated DagDemoSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    settings_files: list[str] = []
    if config_path is not None:
        # Dynaconf silently accepts missing files
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        settings_files.append(str(config_path))

    dynaconf_settings = Dynaconf(
        envvar_prefix="DAGDEMO",
        settings_files=settings_files,
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; Pydantic fields are lowercase.
    # SETTINGS_FILE is how the CLI locates the file, not a setting itself.
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES", "SETTINGS_FILE"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    if "simnet" in raw_config:
        raw_config["simnet"] = {k.lower(): v for k, v in raw_config["simnet"].items()}

    return DagDemoSettings(**raw_config)
