"""Settings model for hxbuild.

This module defines the configuration of a build: where the sources live,
which compiler to run, and how artifacts are published and fanned out.

Contract:
- Inputs: Environment variables, YAML files
- Outputs: Validated settings objects
- Side Effects: None (read-only)
"""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class BuildSettings(BaseSettings):
    """Configuration for a compile pipeline.

    Attributes:
        source_root: Directory the compiler runs in (default: cwd)
        build_script: Base .hxml script, relative to source_root
        haxe_directory: Compiler install directory (empty: use PATH)
        source_directories: Directories watched for changes, relative to source_root
        resource_dir: Directory holding the worker manifest, relative to source_root
        worker_manifest: Worker manifest file name inside resource_dir
        temp_output: Compiler output path, relative to source_root
        final_output: Published artifact path, relative to source_root
        port: Compilation server port (default: 7000)
        worker_output_dir: Subdirectory for worker artifacts (default: html5)
        worker_output_extension: Extension of worker artifacts (default: js)
        publish_wait_attempts: Extra checks for a late temp output (default: 0)
        publish_wait_delay: First backoff delay in seconds between those checks
        server_ready_timeout: Seconds to wait for the server port to accept
        log_level: Logging level (default: info)

    Example:
        >>> settings = BuildSettings()
        >>> assert settings.port == 7000
        >>> assert settings.worker_output_dir == "html5"
    """

    model_config = SettingsConfigDict(
        env_prefix="HXBUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    source_root: str = "."
    build_script: str = "project-html5.hxml"
    haxe_directory: str = ""
    source_directories: list[str] = ["Sources"]

    resource_dir: str = "build/html5-resources"
    worker_manifest: str = "workers.txt"

    temp_output: str | None = None
    final_output: str | None = None

    port: int = 7000
    worker_output_dir: str = "html5"
    worker_output_extension: str = "js"

    publish_wait_attempts: int = 0
    publish_wait_delay: float = 0.05
    server_ready_timeout: float = 5.0

    log_level: str = "info"

    @field_validator("source_root")
    @classmethod
    def expand_and_resolve_path(cls, v: str) -> str:
        """Expand ~ and resolve to absolute path.

        Args:
            v: Path string (may contain ~ or be relative)

        Returns:
            Absolute path as string
        """
        return str(Path(v).expanduser().resolve())

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError(f"port must be between 1 and 65535, got {v}")
        return v

    @field_validator("publish_wait_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 0:
            raise ValueError("publish_wait_attempts cannot be negative")
        return v

    @property
    def root(self) -> Path:
        return Path(self.source_root)

    @property
    def manifest_path(self) -> Path:
        """Absolute path of the worker manifest."""
        return self.root / self.resource_dir / self.worker_manifest

    def watch_paths(self) -> list[Path]:
        """Absolute paths of the watched source directories."""
        return [self.root / directory for directory in self.source_directories]
