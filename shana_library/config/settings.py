"""Settings model for the shana runner.

Contract:
- Inputs: Environment variables, YAML values passed by the loader
- Outputs: Validated settings objects
- Side Effects: None (read-only)
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

SHANA_CORE_PACKAGE = "github.com/go-shana/core"
SHANA_YAML = "shana.yaml"


class ShanaSettings(BaseSettings):
    """Configuration for `shana run`.

    This configures the runner itself, not the service being run. The
    service reads its own shana.yaml from the workspace.

    Attributes:
        go_binary: Go command used for env/tidy/build (default: go)
        core_package: Module path of the Shana core library
        workspace_module: Synthetic module path of the generated workspace
        runtime_config_name: Service config file linked into the workspace
        binary_name: Output name of the built service binary
        workspace_prefix: Prefix of the temporary workspace directory
        skip_dirs: Directory names never scanned for packages
        log_level: Logging level (default: info)

    Example:
        >>> settings = ShanaSettings()
        >>> assert settings.go_binary == "go"
        >>> assert settings.binary_name == "shana-build-service"
    """

    model_config = SettingsConfigDict(
        env_prefix="SHANA_",
        case_sensitive=False,
        extra="ignore",
    )

    go_binary: str = "go"
    core_package: str = SHANA_CORE_PACKAGE
    workspace_module: str = "github.com/go-shana/shana-workspace/debug-server"
    runtime_config_name: str = SHANA_YAML
    binary_name: str = "shana-build-service"
    workspace_prefix: str = "shana-workspace-"
    skip_dirs: list[str] = ["internal", "testdata", "vendor"]
    log_level: str = "info"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Lower-case the level and reject names logging doesn't know."""
        level = v.strip().lower()
        if level not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("binary_name")
    @classmethod
    def reject_path_separators(cls, v: str) -> str:
        """The binary is executed as ./<name> inside the workspace."""
        if not v or "/" in v:
            raise ValueError(f"binary_name must be a plain file name: {v!r}")
        return v
