"""
Structured logging for the portal application.

structlog renders both its own events and stdlib records (uvicorn, SQLAlchemy)
through one formatter, so every line carries the request id and portal id bound
by RequestContextMiddleware.
"""
import logging
import sys
import time
from typing import Dict, Any, Optional
from contextlib import contextmanager

import structlog
from structlog.stdlib import LoggerFactory

from portal.middleware.request_context import portal_ctx_var, request_id_ctx_var

QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "httpx": logging.WARNING,
}


def add_request_context(logger, method_name, event_dict):
    """Processor adding the current request id and portal id."""
    request_id = request_id_ctx_var.get()
    if request_id:
        event_dict.setdefault("request_id", request_id)

    portal_id = portal_ctx_var.get()
    if portal_id is not None:
        event_dict.setdefault("portal_id", portal_id)
    return event_dict


def configure_logging(level: str = "INFO", json_output: bool = False, log_file: Optional[str] = None):
    """
    Route structlog and stdlib logging through a shared processor chain.

    Args:
        level: Root log level name
        json_output: Render JSON lines instead of the console format
        log_file: Optional path that receives the same records as stdout
    """
    shared_processors = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        add_request_context,
    ]

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(quiet_level, root_logger.level))

    structlog.get_logger(__name__).info(
        "Structured logging initialized",
        log_level=level,
        json_output=json_output,
        log_file=log_file,
    )


class SecurityLogger:
    """
    Specialized logger for security events.
    """

    def __init__(self):
        self.logger = structlog.get_logger("security")

    def log_access_violation(self, resource: str, action: str, user_id: str = None,
                             ip_address: str = None, portal_id: int = None, **kwargs):
        """Log access violation attempt."""
        self.logger.warning(
            "Access violation attempted",
            event_type="access_violation",
            resource=resource,
            action=action,
            user_id=user_id,
            ip_address=ip_address,
            portal_id=portal_id,
            **kwargs
        )

    def log_antiforgery_failure(self, path: str, ip_address: str = None, **kwargs):
        """Log a rejected form post whose verification token did not match."""
        self.logger.warning(
            "Anti-forgery token rejected",
            event_type="antiforgery_failure",
            path=path,
            ip_address=ip_address,
            **kwargs
        )


class AuditLogger:
    """
    Audit logger for tracking user actions on portal content.
    """

    def __init__(self):
        self.logger = structlog.get_logger("audit")

    def log_user_action(self, action: str, user_id: str, resource: str = None,
                        details: Dict[str, Any] = None, portal_id: int = None, **kwargs):
        """Log user action for audit trail."""
        event_data = {"event_type": "user_action", "action": action, "user_id": user_id, **kwargs}
        if resource:
            event_data["resource"] = resource
        if details:
            event_data["details"] = details
        # An explicit portal replaces the one bound from the request
        if portal_id is not None:
            event_data["portal_id"] = portal_id

        self.logger.info("User action performed", **event_data)


# Global logger instances
security_logger = SecurityLogger()
audit_logger = AuditLogger()


@contextmanager
def log_performance(operation_name: str, logger: Optional[structlog.stdlib.BoundLogger] = None,
                    **context):
    """
    Context manager to log operation performance.

    Usage:
        with log_performance("materialize_fields", module_id=module.id):
            process_fields(item.content, form)
    """
    if logger is None:
        logger = structlog.get_logger("performance")

    start_time = time.perf_counter()
    success = True

    try:
        yield
    except Exception as e:
        success = False
        logger.error(
            f"Operation {operation_name} failed",
            operation=operation_name,
            error=str(e),
            **context
        )
        raise
    finally:
        duration = time.perf_counter() - start_time
        logger.info(
            f"Operation {operation_name} completed",
            operation=operation_name,
            duration_seconds=duration,
            success=success,
            **context
        )
