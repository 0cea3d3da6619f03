"""Dashboard module — read-only headcount and payroll aggregates."""
