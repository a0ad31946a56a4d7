"""User repository."""

from typing import Optional, Union

from sqlalchemy import select
from structlog import get_logger

from backoffice.domain.entities.user import User
from backoffice.domain.value_objects.email import Email
from backoffice.infrastructure.repositories.base import BaseSQLRepository

logger = get_logger(__name__)


class UserRepository(BaseSQLRepository[User]):
    model = User

    async def find_by_email(self, email: Union[str, Email]) -> Optional[User]:
        """Get user by email address, case-insensitively.

        Args:
            email: Email address to search for (string or Email value object).
        """
        email_value = email.value if isinstance(email, Email) else Email(email).value
        result = await self.db_session.execute(select(User).where(User.email == email_value))
        user = result.scalars().first()
        logger.debug(
            "User lookup by email completed",
            email=Email(email_value).mask_for_logging(),
            found=user is not None,
        )
        return user
