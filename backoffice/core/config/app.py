"""
Application-specific settings.
"""
from typing import Annotated, List, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode


class AppSettings(BaseSettings):
    """
    Defines application-wide settings like project name, environment and CORS origins.

    APP_ENV plays the role of the runtime environment flag: development enables
    debug mode and verbose console logging, production switches to JSON logs.

    Security Note:
        - Ensure ALLOWED_ORIGINS is explicitly set to trusted domains in production.
        - COOKIE_PREFIX must match the prefix used by the authentication layer
          that issues session cookies.
    """
    PROJECT_NAME: str = "backoffice"
    VERSION: str = "0.1.0"
    APP_ENV: str = Field(default="development", pattern="^(development|test|staging|production)$")
    DEBUG: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    COOKIE_PREFIX: str = "backoffice_"
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default="http://localhost:3000", validate_default=True
    )

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """
        Splits a comma-separated string of origins into a list.

        Args:
            v: Input value as a string or list of origins.

        Returns:
            List of stripped origin strings.
        """
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v

    @property
    def SESSION_COOKIE_NAME(self) -> str:
        """Name of the cookie carrying the caller's session identifier."""
        return f"{self.COOKIE_PREFIX}session"
