"""Rules deciding whether deactivation restrictions may be bypassed."""

from typing import Iterable, Optional, Union

from backoffice.domain.value_objects.deactivation import DeactivationStrategy


def can_skip_restriction(
    skipped_restrictions: Optional[Iterable[str]],
    strategy: Union[DeactivationStrategy, str, None],
) -> bool:
    """Returns True when restriction checks may be skipped.

    Skipping is only honoured for soft deletes, and only when the caller
    names at least one restriction. Hard deletes always enforce every
    restriction.

    Args:
        skipped_restrictions: Restriction names the caller wants to bypass.
        strategy: The deactivation strategy; `None` means the default.
    """
    if not skipped_restrictions:
        return False
    if isinstance(skipped_restrictions, str):
        skipped_restrictions = [skipped_restrictions]
    if not any(skipped_restrictions):
        return False
    return DeactivationStrategy.parse(strategy) is DeactivationStrategy.SOFT
