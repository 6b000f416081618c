"""
GrievDesk SLA Engine - Bootstrap
=================================

Wires settings, logging and the SLA configuration manager into a ready
SLAService for the hosting ticket service.

STARTUP:
1. Setup structured logging
2. Load SLA configuration
3. Start config file watcher

SHUTDOWN:
1. Stop config file watcher
"""

from typing import Optional, Tuple

from grievdesk.config import Settings, get_settings
from grievdesk.shared.infrastructure.logging import setup_logging, get_logger
from grievdesk.sla.application import SLAService
from grievdesk.sla.infrastructure import SLAConfigManager

logger = get_logger(__name__)


def create_sla_service(
    settings: Optional[Settings] = None
) -> Tuple[SLAService, SLAConfigManager]:
    """
    Build the SLA service and its configuration manager.

    Raises:
        ConfigurationException: If the SLA config file is invalid
    """
    settings = settings or get_settings()

    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting SLA engine", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    logger.info("Loading SLA configuration", extra={"path": str(settings.sla_config_path)})
    config_manager = SLAConfigManager()
    config = config_manager.load(settings.sla_config_path)
    if settings.watch_sla_config:
        config_manager.start_watching()

    service = SLAService(config_manager, settings.reference_timezone)

    logger.info("SLA engine started", extra={
        "holidays": len(config.holidays),
        "reference_timezone": settings.reference_timezone
    })
    return service, config_manager


def shutdown(config_manager: SLAConfigManager) -> None:
    """Release background resources."""
    logger.info("Shutting down SLA engine")
    config_manager.stop_watching()
