"""A Value Object representing an email address in the domain.

As a Value Object it is immutable, and equality is based on the normalized
address rather than on identity.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

from backoffice.core.exceptions import InvalidValueObjectError


@dataclass(frozen=True, slots=True)
class Email:
    """An immutable, self-validating email address.

    Business rules enforced on instantiation:
    - Conforms to a standard email format.
    - Has a reasonable length.
    - Is normalized to lowercase.

    Attributes:
        value: The normalized string representation of the address.
    """

    value: str

    MAX_LENGTH: ClassVar[int] = 254
    MIN_LENGTH: ClassVar[int] = 5
    EMAIL_PATTERN: ClassVar[re.Pattern] = re.compile(
        r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    )

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise InvalidValueObjectError("Email value must be a string")

        normalized_value = self.value.strip().lower()
        object.__setattr__(self, "value", normalized_value)

        if not (self.MIN_LENGTH <= len(normalized_value) <= self.MAX_LENGTH):
            raise InvalidValueObjectError(
                f"Email length must be between {self.MIN_LENGTH} and {self.MAX_LENGTH} characters"
            )
        if not self.EMAIL_PATTERN.match(normalized_value):
            raise InvalidValueObjectError("Invalid email format")

    @property
    def domain(self) -> str:
        return self.value.split("@")[1]

    def mask_for_logging(self) -> str:
        """Returns a masked version of the email for safe logging.

        Example: 'us**@e*****.com'
        """
        local, domain_part = self.value.split("@")
        masked_local = f"{local[:2]}{'*' * max(len(local) - 2, 0)}"
        masked_domain = f"{domain_part[:1]}{'*' * max(len(domain_part) - 2, 0)}{domain_part[-1:]}"
        return f"{masked_local}@{masked_domain}"

    def __str__(self) -> str:
        return self.value
