"""Transaction boundary spanning several repository calls.

Example:
    async with UnitOfWork() as uow:
        customers = uow.get_repo(CustomerRepository)
        roles = uow.get_repo(RoleRepository)
        await customers.toggle_is_active(DeactivationCommand(id=customer_id))
        await roles.toggle_is_active(DeactivationCommand(id=role_id))
        await uow.commit()

Leaving the block without `commit()`, or with an exception, rolls back.
"""

from typing import Callable, Dict, Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from backoffice.infrastructure.database.async_db import get_session_factory

logger = get_logger(__name__)

RepoT = TypeVar("RepoT")


class UnitOfWork:
    def __init__(self, session_factory: Optional[Callable[[], AsyncSession]] = None):
        self._session_factory = session_factory
        self._repositories: Dict[type, object] = {}
        self._committed = False
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> "UnitOfWork":
        factory = self._session_factory or get_session_factory()
        self.session = factory()
        self._committed = False
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is not None or not self._committed:
                await self.session.rollback()
                if exc_type is not None:
                    logger.warning(
                        "Unit of work rolled back",
                        error_type=exc_type.__name__,
                    )
        finally:
            await self.session.close()
            self._repositories.clear()

    def get_repo(self, repository_cls: Type[RepoT]) -> RepoT:
        """Returns a repository bound to this unit of work's session."""
        if self.session is None:
            raise RuntimeError("UnitOfWork must be entered before requesting repositories")
        if repository_cls not in self._repositories:
            self._repositories[repository_cls] = repository_cls(self.session, managed=True)
        return self._repositories[repository_cls]

    async def commit(self) -> None:
        await self.session.commit()
        self._committed = True
        logger.debug("Unit of work committed")

    async def rollback(self) -> None:
        await self.session.rollback()
        self._committed = False
