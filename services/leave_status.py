from typing import Optional

from models.demande import STATUS_APPROVED, STATUS_PENDING, STATUS_REFUSED


def derive_status(approve1: Optional[bool], approve2: Optional[bool], has_manager2: bool) -> str:
    """
    Status of a leave request from its two manager decisions.

    None means the manager has not decided yet. Any explicit refusal wins;
    without a second manager the first approval is enough.
    """
    if approve1 is False or approve2 is False:
        return STATUS_REFUSED
    if approve1 is True and approve2 is True:
        return STATUS_APPROVED
    if approve1 is True and not has_manager2:
        return STATUS_APPROVED
    return STATUS_PENDING
