"""Employee directory — Employee model, leave balance record, schemas and service."""

from hrcore.employees.models import Employee, LeaveBalance

__all__ = ["Employee", "LeaveBalance"]
