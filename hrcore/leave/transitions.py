"""Leave status state machine.

Every (current, target) pair is listed explicitly with the effect it has on
the employee's leave balance. Only approval debits and only rejecting an
approved leave credits; every other pair is a ledger no-op.
"""

from __future__ import annotations

import enum
from typing import Union

from hrcore.common.constants import LeaveStatus
from hrcore.common.exceptions import ValidationException
from hrcore.common.validators import check_leave_status


class LedgerEffect(str, enum.Enum):
    debit = "debit"
    credit = "credit"
    none = "none"


_P, _A, _R = LeaveStatus.pending, LeaveStatus.approved, LeaveStatus.rejected

LEAVE_TRANSITIONS: dict[tuple[LeaveStatus, LeaveStatus], LedgerEffect] = {
    (_P, _P): LedgerEffect.none,
    (_P, _A): LedgerEffect.debit,
    (_P, _R): LedgerEffect.none,
    # Approved -> Pending keeps the debit in place.
    (_A, _P): LedgerEffect.none,
    (_A, _A): LedgerEffect.none,
    (_A, _R): LedgerEffect.credit,
    (_R, _P): LedgerEffect.none,
    (_R, _A): LedgerEffect.debit,
    (_R, _R): LedgerEffect.none,
}


def as_leave_status(value: Union[LeaveStatus, str]) -> LeaveStatus:
    """Accept ``"Approved"``, ``"approved"`` or the enum member."""
    if isinstance(value, LeaveStatus):
        return value
    try:
        return LeaveStatus(str(value).strip().capitalize())
    except ValueError:
        raise ValidationException([check_leave_status(value).reason]) from None


def leave_effect(
    current: Union[LeaveStatus, str],
    target: Union[LeaveStatus, str],
) -> LedgerEffect:
    """Ledger effect of moving a leave from *current* to *target*."""
    current, target = as_leave_status(current), as_leave_status(target)
    return LEAVE_TRANSITIONS[(current, target)]
