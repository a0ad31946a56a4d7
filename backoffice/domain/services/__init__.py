from .deactivation_policy import can_skip_restriction
from .deactivation_service import DeactivationService

__all__ = ["DeactivationService", "can_skip_restriction"]
