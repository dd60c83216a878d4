"""Error responses shared by the routers."""

import structlog
from fastapi import HTTPException, status

from cli.config_models import MindJournalConfig

logger = structlog.get_logger()


def server_error(
    event: str, exc: Exception, config: MindJournalConfig, message: str = "Server error", **kw
) -> HTTPException:
    """Log ``exc`` and build a 500. Exception text is only exposed in development."""
    logger.error(event, error=str(exc), error_type=type(exc).__name__, **kw)
    detail = f"{message}: {exc}" if config.is_development else message
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def not_found(what: str = "Journal entry") -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")
