"""Common module — shared utilities for HR Core."""

from hrcore.common.audit import AuditTrail, create_audit_entry
from hrcore.common.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MONTH_NAMES,
    AttendanceStatus,
    EmploymentStatus,
    LeaveStatus,
    LeaveType,
    PayrollStatus,
    month_name,
    month_bounds,
    month_number,
)
from hrcore.common.exceptions import (
    AppException,
    ConcurrentModificationException,
    DuplicateEntryException,
    InsufficientBalanceException,
    InvalidTransitionException,
    NotFoundException,
    SequenceExhaustedException,
    ValidationException,
    register_exception_handlers,
)
from hrcore.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "AttendanceStatus",
    "EmploymentStatus",
    "LeaveStatus",
    "LeaveType",
    "PayrollStatus",
    "MONTH_NAMES",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "month_name",
    "month_bounds",
    "month_number",
    # Exceptions
    "AppException",
    "ConcurrentModificationException",
    "DuplicateEntryException",
    "InsufficientBalanceException",
    "InvalidTransitionException",
    "NotFoundException",
    "SequenceExhaustedException",
    "ValidationException",
    "register_exception_handlers",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
