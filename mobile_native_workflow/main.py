"""Mobile native workflow MCP server - entry point."""

import logging

from mobile_native_workflow.infrastructure.persistence.well_known_directory import get_workflow_log_path
from mobile_native_workflow.server.app import create_server
from mobile_native_workflow.server.container import Container
from mobile_native_workflow.shared.logging import setup_logging

logger = logging.getLogger(__name__)


def _apply_logging_config(container: Container) -> None:
    """Apply logging config; an empty log file means the well-known workflow log."""
    c = container.config
    file_path = c.log_file or str(get_workflow_log_path(c.workflow.project_path or None))
    setup_logging(
        level=c.log_level,
        file_path=file_path,
        rotation_max_mb=c.log_rotation_max_mb,
        rotation_backups=c.log_rotation_backups,
    )


def main() -> None:
    container = Container()
    _apply_logging_config(container)
    server = create_server(container)
    logger.info("Starting %s over %s", container.config.server.name, container.config.server.transport)
    server.run(transport=container.config.server.transport)


if __name__ == "__main__":
    main()
