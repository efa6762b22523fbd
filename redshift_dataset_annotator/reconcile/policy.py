"""Keep-vs-overwrite decision shared by the rename and description steps."""

import enum
from dataclasses import dataclass


class Decision(enum.Enum):
    KEEP = "keep"
    INTRODUCE = "introduce"
    OVERWRITE = "overwrite"


@dataclass(frozen=True)
class ReconcilePolicy:
    """Conflict policy for values that were already set by hand."""

    force_rename: bool = False
    force_update_description: bool = False


def resolve(existing: str | None, requested: str, force: bool) -> Decision:
    """Decide what to do with an existing value given a requested one.

    - No existing value: INTRODUCE.
    - Existing value is blank: OVERWRITE (filling a blank is never a conflict).
    - Existing equals requested: KEEP.
    - Existing differs: OVERWRITE when forced, otherwise KEEP.
    """
    if existing is None:
        return Decision.INTRODUCE
    if not existing.strip():
        return Decision.OVERWRITE
    if existing == requested or not force:
        return Decision.KEEP
    return Decision.OVERWRITE
