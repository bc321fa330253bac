"""
Base service class for common service patterns across all slices.
"""

from typing import Optional, TypeVar, Generic

import structlog
from sqlalchemy import select, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar('T')  # Generic type for models


class BaseService(Generic[T]):
    """
    Base service class that provides common functionality for all services.

    Provides:
    - Database session management
    - Portal-scoped operations (with optional host-wide rows)
    - Common error handling patterns
    - Logging setup
    """

    def __init__(self, db_session: AsyncSession, portal_id: Optional[int] = None):
        """
        Initialize base service with database session and portal context.

        Args:
            db_session: AsyncSession for database operations
            portal_id: Portal ID for scoping operations (None for host-level access)
        """
        self.db = db_session
        self.portal_id = portal_id
        self.logger = structlog.get_logger(self.__class__.__name__)

    def create_portal_filter(self, model_class: type[T], include_host: bool = False):
        """
        Create a portal filter condition for queries.

        Host-level services (portal_id None) see every row. Rows with a NULL
        portal_id are host-wide and are added when include_host is set.
        """
        if self.portal_id is None:
            return True
        if include_host:
            return or_(model_class.portal_id == self.portal_id, model_class.portal_id.is_(None))
        return model_class.portal_id == self.portal_id

    async def get_by_id(self, model_class: type[T], item_id: str, include_host: bool = False) -> Optional[T]:
        """
        Get an item by ID within portal scope.

        Args:
            model_class: SQLAlchemy model class
            item_id: ID of the item to retrieve
            include_host: Also match host-wide rows

        Returns:
            Model instance or None if not found
        """
        try:
            portal_filter = self.create_portal_filter(model_class, include_host)
            if portal_filter is not True:
                stmt = select(model_class).where(and_(model_class.id == item_id, portal_filter))
            else:
                stmt = select(model_class).where(model_class.id == item_id)

            result = await self.db.execute(stmt)
            return result.scalar_one_or_none()
        except Exception as e:
            self.logger.error("Lookup by id failed", model=model_class.__name__, item_id=item_id, error=str(e))
            raise

    def log_operation(self, operation: str, details: str = ""):
        """
        Log service operations with consistent format.

        Args:
            operation: Operation name (create, update, delete, etc.)
            details: Additional details
        """
        service_name = self.__class__.__name__
        message = f"[{service_name}] {operation}"
        if details:
            message += f": {details}"
        portal_info = f"portal: {self.portal_id}" if self.portal_id is not None else "host"
        message += f" ({portal_info})"

        self.logger.info(message)

    async def handle_service_error(self, operation: str, error: Exception, item_id: str = None):
        """
        Roll back, log and re-raise a service error.

        Args:
            operation: Operation that failed
            error: Exception that occurred
            item_id: ID of item involved (optional)
        """
        await self.db.rollback()

        self.logger.error(
            "Service operation failed",
            operation=operation,
            item_id=item_id,
            portal_id=self.portal_id,
            error=str(error),
        )
        raise error


class PortalScopedCRUDService(BaseService[T]):
    """
    Extended base service bound to one model class.
    """

    def __init__(self, db_session: AsyncSession, portal_id: Optional[int], model_class: type[T]):
        super().__init__(db_session, portal_id)
        self.model_class = model_class

    async def get_by_id(self, item_id: str, include_host: bool = False) -> Optional[T]:
        """Get item by ID using the service's model class."""
        return await super().get_by_id(self.model_class, item_id, include_host)
