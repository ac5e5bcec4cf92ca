"""
Configuration management for the gitsemver engine.

Provides centralized configuration for repository access, version
computation and output formatting with sensible defaults.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from gitsemver.core.exceptions import ConfigurationError


@dataclass
class RepositoryConfig:
    """Configuration for repository access."""

    # Directory inside the repository to operate on
    path: str = "."

    # Git executable used for all repository queries
    git_executable: str = "git"

    # Timeout for git operations (seconds)
    git_timeout: int = 60

    # Remote whose symbolic HEAD names the default branch
    remote: str = "origin"

    # Explicit main branch name, skips remote detection when set
    main_branch: Optional[str] = None


@dataclass
class VersioningConfig:
    """Configuration for version computation."""

    # Tag name prefix for mono-repo modules (e.g. "api" for "api-v1.2.3")
    prefix: Optional[str] = None

    # Only commits touching this path contribute to the bump
    filter_path: Optional[str] = None

    # Print the plain release triple without branch metadata
    release: bool = False


@dataclass
class OutputConfig:
    """Configuration for result output."""

    # Emit GitHub Actions output instead of the bare version
    action: bool = False

    # Output variable name used in action mode
    output_name: str = "version"


@dataclass
class EngineConfig:
    """Master configuration combining all section configurations."""

    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    versioning: VersioningConfig = field(default_factory=VersioningConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    # Enable verbose logging
    verbose: bool = False


class Config:
    """
    Central configuration manager providing access to all settings.

    Supports loading from environment variables (including a .env file)
    and JSON configuration files.
    """

    _instance: Optional["Config"] = None
    _config: EngineConfig = None

    ENV_PREFIX = "GITSEMVER_"

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._config = EngineConfig()
        return cls._instance

    @classmethod
    def get(cls) -> EngineConfig:
        """Get the current engine configuration."""
        if cls._instance is None:
            cls()
        return cls._instance._config

    @classmethod
    def reset(cls) -> EngineConfig:
        """Discard any loaded settings and return a fresh default configuration."""
        instance = cls()
        instance._config = EngineConfig()
        return instance._config

    @classmethod
    def load_from_file(cls, config_path: str) -> EngineConfig:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file.

        Returns:
            Loaded EngineConfig instance.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(
                    f"Invalid configuration file {config_path}: {e}",
                    details={"path": str(config_path)},
                )

        instance = cls()
        instance._config = cls._dict_to_config(data)
        return instance._config

    @classmethod
    def load_from_env(cls, dotenv_path: Optional[str] = None) -> EngineConfig:
        """
        Load configuration from environment variables.

        Environment variables are prefixed with GITSEMVER_. A .env file is
        read first; variables already present in the environment win.

        Returns:
            EngineConfig with environment overrides applied.
        """
        load_dotenv(dotenv_path=dotenv_path, override=False)

        instance = cls()
        config = instance._config

        if cls._env("REPO_PATH"):
            config.repository.path = cls._env("REPO_PATH")

        if cls._env("GIT"):
            config.repository.git_executable = cls._env("GIT")

        if cls._env("GIT_TIMEOUT"):
            try:
                config.repository.git_timeout = int(cls._env("GIT_TIMEOUT"))
            except ValueError:
                raise ConfigurationError(
                    f"{cls.ENV_PREFIX}GIT_TIMEOUT must be an integer",
                    details={"value": cls._env("GIT_TIMEOUT")},
                )

        if cls._env("REMOTE"):
            config.repository.remote = cls._env("REMOTE")

        if cls._env("MAIN_BRANCH"):
            config.repository.main_branch = cls._env("MAIN_BRANCH")

        if cls._env("PREFIX"):
            config.versioning.prefix = cls._env("PREFIX")

        if cls._env("FILTER_PATH"):
            config.versioning.filter_path = cls._env("FILTER_PATH")

        if cls._env("RELEASE"):
            config.versioning.release = cls._env_flag("RELEASE")

        if cls._env("ACTION"):
            config.output.action = cls._env_flag("ACTION")

        if cls._env("VERBOSE"):
            config.verbose = cls._env_flag("VERBOSE")

        return config

    @classmethod
    def _env(cls, name: str) -> Optional[str]:
        return os.getenv(cls.ENV_PREFIX + name)

    @classmethod
    def _env_flag(cls, name: str) -> bool:
        return cls._env(name).lower() in ("true", "1", "yes")

    @staticmethod
    def _dict_to_config(data: dict) -> EngineConfig:
        """Convert a dictionary to EngineConfig."""
        config = EngineConfig()

        try:
            if "repository" in data:
                config.repository = RepositoryConfig(**data["repository"])

            if "versioning" in data:
                config.versioning = VersioningConfig(**data["versioning"])

            if "output" in data:
                config.output = OutputConfig(**data["output"])
        except TypeError as e:
            raise ConfigurationError(f"Unknown configuration key: {e}")

        if "verbose" in data:
            config.verbose = data["verbose"]

        return config

    @classmethod
    def save_to_file(cls, config_path: str) -> None:
        """
        Save current configuration to a JSON file.

        Args:
            config_path: Path to save the configuration file.
        """
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        config = cls.get()
        data = cls._config_to_dict(config)

        with open(config_path, "w") as f:
            json.dump(data, f, indent=2)

    @staticmethod
    def _config_to_dict(config: EngineConfig) -> dict:
        """Convert EngineConfig to a dictionary."""
        return {
            "repository": {
                "path": config.repository.path,
                "git_executable": config.repository.git_executable,
                "git_timeout": config.repository.git_timeout,
                "remote": config.repository.remote,
                "main_branch": config.repository.main_branch,
            },
            "versioning": {
                "prefix": config.versioning.prefix,
                "filter_path": config.versioning.filter_path,
                "release": config.versioning.release,
            },
            "output": {
                "action": config.output.action,
                "output_name": config.output.output_name,
            },
            "verbose": config.verbose,
        }
