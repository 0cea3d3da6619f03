"""Payroll module — salary breakup calculator, payroll records, payslips."""

from hrcore.payroll.models import Payroll

__all__ = ["Payroll"]
