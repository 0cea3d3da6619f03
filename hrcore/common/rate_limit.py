"""Rate limiting configuration using slowapi.

Module-level Limiter shared by the routers; write endpoints that do real
work (leave application, payroll generation) carry their own limits.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from hrcore.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["60/minute"],
    enabled=settings.RATE_LIMIT_ENABLED,
)
