"""Leave module — requests, status state machine, balance ledger, calendar."""

from hrcore.leave.models import Leave

__all__ = ["Leave"]
