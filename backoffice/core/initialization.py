"""Application initialization and setup.

This module handles the initialization tasks required before the application starts,
including environment variable loading, logging configuration and settings validation.
"""

from dotenv import load_dotenv

from backoffice.core.config.settings import settings
from backoffice.core.logging import configure_from_settings


def initialize_application() -> None:
    """Initialize the application with all necessary setup tasks.

    This function performs the following initialization tasks:
    1. Load environment variables
    2. Configure logging
    3. Reject incomplete configuration outside development and test
    """
    # Load environment variables
    load_dotenv(override=False)

    # Configure logging
    configure_from_settings()

    settings.validate_required_fields()
