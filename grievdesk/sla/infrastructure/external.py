"""
SLA Configuration Sources
==========================

Configuration providers for the SLA engine:
- YAML config file with watchdog hot-reload
- Static in-memory configuration
"""

import threading
from pathlib import Path
from typing import Iterable, Optional, Union

import yaml
from pydantic import ValidationError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from grievdesk.core import ConfigurationException
from grievdesk.shared.infrastructure.logging import get_logger
from grievdesk.sla.application.services import ISLAConfigProvider
from grievdesk.sla.domain.value_objects import Holiday, SLAConfig

logger = get_logger(__name__)


class ConfigFileHandler(FileSystemEventHandler):
    """Watchdog event handler for SLA config file changes."""

    def __init__(self, config_manager: "SLAConfigManager", config_path: Path):
        self.config_manager = config_manager
        self.config_path = config_path
        super().__init__()

    def _is_config_file(self, path) -> bool:
        if isinstance(path, bytes):
            path = path.decode()
        return Path(path).resolve() == self.config_path.resolve()

    def on_modified(self, event):
        """Handle file modification event."""
        if event.is_directory:
            return
        if self._is_config_file(event.src_path):
            logger.info("Config file changed", extra={"path": str(event.src_path)})
            self.config_manager.reload()

    def on_created(self, event):
        self.on_modified(event)

    def on_moved(self, event):
        # Editors that save atomically write a temp file and rename it over the config
        if event.is_directory:
            return
        if self._is_config_file(event.dest_path):
            logger.info("Config file replaced", extra={"path": str(event.dest_path)})
            self.config_manager.reload()


class SLAConfigManager(ISLAConfigProvider):
    """
    Thread-safe SLA configuration manager with hot-reload support.

    Uses watchdog to monitor file changes and reload configuration
    without restarting the service. Readers always get a complete
    snapshot; a reload that fails validation keeps the previous one.
    """

    def __init__(self):
        self._config: Optional[SLAConfig] = None
        self._lock = threading.Lock()
        self._path: Optional[Path] = None
        self._observer = None

    def load(self, path: Union[str, Path]) -> SLAConfig:
        """
        Initial configuration load.

        Raises:
            ConfigurationException: If the file exists but is invalid
        """
        path = Path(path)
        config = self._load_from_file(path)
        with self._lock:
            self._path = path
            self._config = config
        return config

    def _load_from_file(self, path: Path) -> SLAConfig:
        """Load and parse YAML config file."""
        if not path.exists():
            logger.warning(
                "SLA config file not found, using defaults",
                extra={"path": str(path)}
            )
            return SLAConfig()

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationException(
                f"Invalid YAML in SLA config: {path}",
                {"path": str(path), "error": str(e)}
            )

        if not isinstance(data, dict):
            raise ConfigurationException(
                "SLA config must be a mapping",
                {"path": str(path), "type": type(data).__name__}
            )

        try:
            return SLAConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationException(
                f"Invalid SLA config: {path}",
                {"path": str(path), "errors": e.errors(include_url=False)}
            )

    def reload(self) -> bool:
        """Reload configuration from file."""
        if self._path is None:
            return False

        try:
            new_config = self._load_from_file(self._path)
        except ConfigurationException as e:
            logger.error(
                "Failed to reload SLA config, keeping previous configuration",
                extra={"error": e.message, "details": e.details}
            )
            return False

        with self._lock:
            self._config = new_config
        logger.info(
            "SLA configuration reloaded successfully",
            extra={"holidays": len(new_config.holidays)}
        )
        return True

    def replace_holidays(self, holidays: Iterable[Holiday]) -> SLAConfig:
        """
        Swap in a new holiday list, keeping the rest of the configuration.

        Used when holidays are managed outside the YAML file.

        Raises:
            ConfigurationException: If the list contains duplicate dates
        """
        with self._lock:
            current = self._config or SLAConfig()
            try:
                new_config = SLAConfig.model_validate({
                    **current.model_dump(),
                    "holidays": list(holidays)
                })
            except ValidationError as e:
                raise ConfigurationException(
                    "Invalid holiday list",
                    {"errors": e.errors(include_url=False)}
                )
            self._config = new_config

        logger.info("Holiday list replaced", extra={"holidays": len(new_config.holidays)})
        return new_config

    def start_watching(self) -> None:
        """
        Start watching configuration file for changes.

        Skips watching if the file doesn't exist or the platform
        has no file notification support.
        """
        if self._path is None:
            raise ConfigurationException("Config not loaded. Call load() first.")

        if not self._path.exists():
            logger.info(
                "Config file doesn't exist, skipping file watch",
                extra={"path": str(self._path)}
            )
            return

        try:
            self._observer = Observer()
            handler = ConfigFileHandler(self, self._path)
            self._observer.schedule(
                handler,
                str(self._path.parent),
                recursive=False
            )
            self._observer.start()
            logger.info("Started watching config file", extra={"path": str(self._path)})
        except OSError as e:
            logger.warning(
                "File watching not available, using static config",
                extra={"error": str(e)}
            )
            self._observer = None

    def stop_watching(self) -> None:
        """Stop watching configuration file (safe to call even if not watching)."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

    @property
    def is_watching(self) -> bool:
        return self._observer is not None

    @property
    def config(self) -> SLAConfig:
        """Get current configuration."""
        with self._lock:
            config = self._config
        if config is None:
            raise ConfigurationException("SLA configuration not loaded")
        return config

    def get_config(self) -> SLAConfig:
        return self.config


class StaticConfigProvider(ISLAConfigProvider):
    """Fixed configuration, for embedding and tests."""

    def __init__(self, config: Optional[SLAConfig] = None):
        self._config = config or SLAConfig()

    def get_config(self) -> SLAConfig:
        return self._config
