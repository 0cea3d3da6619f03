"""Import every ORM model so ``Base.metadata`` and relationship strings resolve."""

from hrcore.attendance.models import AttendanceRecord
from hrcore.common.audit import AuditTrail
from hrcore.employees.models import Employee
from hrcore.leave.models import Leave
from hrcore.payroll.models import Payroll

__all__ = ["AttendanceRecord", "AuditTrail", "Employee", "Leave", "Payroll"]
