from typing import Optional

from sqlmodel import Field

from backoffice.core.exceptions import InvalidValueObjectError
from backoffice.domain.entities.base import BaseEntity
from backoffice.domain.value_objects.email import Email


class User(BaseEntity, table=True):
    """A back-office operator.

    Attributes:
        email: Unique, lowercase email address.
        name: Display name.
        hashed_password: Password hash produced outside this service.
        role_id: Optional role granting permissions. A role cannot be hard
            deleted while users reference it.
    """

    __tablename__ = "users"

    email: str = Field(max_length=254, unique=True, index=True, nullable=False)
    name: str = Field(max_length=100, nullable=False)
    hashed_password: str = Field(max_length=255, nullable=False)
    role_id: Optional[str] = Field(
        default=None, foreign_key="roles.id", ondelete="RESTRICT", index=True
    )

    @classmethod
    def create(
        cls,
        email: str,
        name: str,
        hashed_password: str,
        role_id: Optional[str] = None,
    ) -> "User":
        name = (name or "").strip()
        if not name:
            raise InvalidValueObjectError("User name cannot be empty")
        if not hashed_password:
            raise InvalidValueObjectError("Password hash cannot be empty")
        return cls(
            email=Email(email).value,
            name=name,
            hashed_password=hashed_password,
            role_id=role_id,
        )
