"""
Centralized route imports and utilities for FastAPI routes.
Use this module to standardize route patterns across all slices.
"""

# Core FastAPI imports
from fastapi import APIRouter, Depends, Request, HTTPException, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

# Core application imports
from portal.features.core.templates import templates
from portal.features.core.database import get_db
from portal.features.core.validation import FormHandler

import structlog

__all__ = [
    # FastAPI core
    'APIRouter', 'Depends', 'Request', 'HTTPException', 'status',

    # Response types
    'HTMLResponse', 'JSONResponse', 'RedirectResponse',

    # Database
    'AsyncSession', 'get_db',

    # Templates and forms
    'templates', 'FormHandler',

    # Logging
    'get_logger',

    # Utilities
    'handle_route_error', 'commit_transaction',
]


def get_logger(name: str):
    """Standardized logger creation for routes."""
    return structlog.get_logger(name)


def handle_route_error(operation: str, error: Exception, **context):
    """Log a failed route operation with its context."""
    get_logger("route_handler").error(
        "Route operation failed",
        operation=operation,
        error=str(error),
        error_type=type(error).__name__,
        **context,
    )


async def commit_transaction(db: AsyncSession, operation: str):
    """Commit the request's unit of work; roll back and answer 500 on failure."""
    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        handle_route_error(operation, e)
        raise HTTPException(status_code=500, detail=f"Failed to {operation}") from e
