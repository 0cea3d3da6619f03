"""HR Core — payroll and leave-balance engine."""

__version__ = "1.0.0"
