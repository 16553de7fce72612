"""
Configuration management for vhd.

Everything lives in one config folder:
- $VHD_HOME if set, otherwise ~/.vhd
- config.json: settings below
- catalog.db: SQLite catalog (default backend)
- priv.json: Google Cloud service account key (default location)
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict, field

logger = logging.getLogger(__name__)

CONFIG_FOLDER_NAME = ".vhd"
CONFIG_FILE_NAME = "config.json"
DEFAULT_CATALOG_DB = "catalog.db"
DEFAULT_CREDENTIALS = "priv.json"
DEFAULT_HISTORY = "history"

# 200 MiB per stored object part
DEFAULT_CHUNK_SIZE = 52428800 * 4

CATALOG_BACKENDS = ("sqlite", "flatfile")


@dataclass
class CatalogConfig:
    """Catalog backend settings.

    ``path`` is the SQLite file for the sqlite backend and the folder
    holding the per-drive subfolders for the flatfile backend. When unset,
    both default to locations inside the config folder.
    """
    backend: str = "sqlite"
    path: Optional[str] = None


@dataclass
class StorageConfig:
    """Storage backend settings."""
    chunk_size: int = DEFAULT_CHUNK_SIZE
    credentials_file: Optional[str] = None


@dataclass
class CLIConfig:
    """CLI default options."""
    verbose: bool = False
    history: bool = True


@dataclass
class VHDConfig:
    """Main vhd configuration."""
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    cli: CLIConfig = field(default_factory=CLIConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "catalog": asdict(self.catalog),
            "storage": asdict(self.storage),
            "cli": asdict(self.cli),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VHDConfig':
        """Create from dictionary."""
        return cls(
            catalog=CatalogConfig(**data.get("catalog", {})),
            storage=StorageConfig(**data.get("storage", {})),
            cli=CLIConfig(**data.get("cli", {})),
        )

    def catalog_path(self) -> Path:
        """Location of the catalog, resolved against the config folder."""
        if self.catalog.path:
            return Path(self.catalog.path).expanduser()
        if self.catalog.backend == "flatfile":
            return get_config_folder()
        return get_config_folder() / DEFAULT_CATALOG_DB

    def credentials_path(self) -> Path:
        """Location of the Google Cloud credentials file."""
        if self.storage.credentials_file:
            return Path(self.storage.credentials_file).expanduser()
        return get_config_folder() / DEFAULT_CREDENTIALS

    def history_path(self) -> Optional[Path]:
        """Shell history file, or None when history is disabled."""
        if not self.cli.history:
            return None
        return get_config_folder() / DEFAULT_HISTORY


def get_config_folder() -> Path:
    """
    Get the config folder.

    Returns:
        $VHD_HOME if set, otherwise ~/.vhd
    """
    home = os.environ.get("VHD_HOME")
    if home:
        return Path(home).expanduser()
    return Path.home() / CONFIG_FOLDER_NAME


def ensure_config_folder() -> Path:
    """
    Create the config folder (mode 0700) if it does not exist.

    Returns:
        Path to the config folder

    Raises:
        NotADirectoryError: The path exists but is not a directory
    """
    folder = get_config_folder()
    if folder.exists() and not folder.is_dir():
        raise NotADirectoryError(f"path {folder} not a directory")
    folder.mkdir(mode=0o700, parents=True, exist_ok=True)
    return folder


def get_config_path() -> Path:
    """Get configuration file path."""
    return get_config_folder() / CONFIG_FILE_NAME


def load_config() -> VHDConfig:
    """
    Load configuration from file.

    Returns:
        VHDConfig instance with loaded values or defaults

    Raises:
        ValueError: The file exists but cannot be parsed
    """
    config_path = get_config_path()

    if not config_path.exists():
        return VHDConfig()

    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
        config = VHDConfig.from_dict(data)
    except (json.JSONDecodeError, OSError, TypeError) as e:
        raise ValueError(f"cannot load config from {config_path}: {e}") from e

    if config.catalog.backend not in CATALOG_BACKENDS:
        raise ValueError(
            f"unknown catalog backend '{config.catalog.backend}' in {config_path}"
        )
    return config


def save_config(config: VHDConfig) -> Path:
    """
    Save configuration to file.

    Args:
        config: Configuration to save

    Returns:
        Path the configuration was written to
    """
    ensure_config_folder()
    config_path = get_config_path()

    with open(config_path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)

    logger.debug(f"Configuration saved to {config_path}")
    return config_path


def update_config(
    # Catalog settings
    catalog_backend: Optional[str] = None,
    catalog_path: Optional[str] = None,
    # Storage settings
    chunk_size: Optional[int] = None,
    credentials_file: Optional[str] = None,
    # CLI settings
    cli_verbose: Optional[bool] = None,
    cli_history: Optional[bool] = None,
) -> VHDConfig:
    """
    Update configuration.

    Only updates provided values, leaving others unchanged.

    Raises:
        ValueError: Unknown catalog backend or non-positive chunk size
    """
    config = load_config()

    if catalog_backend is not None:
        if catalog_backend not in CATALOG_BACKENDS:
            raise ValueError(f"unknown catalog backend '{catalog_backend}'")
        config.catalog.backend = catalog_backend
    if catalog_path is not None:
        config.catalog.path = catalog_path

    if chunk_size is not None:
        if chunk_size <= 0:
            raise ValueError("chunk size must be positive")
        config.storage.chunk_size = chunk_size
    if credentials_file is not None:
        config.storage.credentials_file = credentials_file

    if cli_verbose is not None:
        config.cli.verbose = cli_verbose
    if cli_history is not None:
        config.cli.history = cli_history

    save_config(config)
    return config
