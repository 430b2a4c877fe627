"""
Request rate limiting shared by the routers.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from myfocus.core.settings import settings

# In-process storage; limits are per worker
limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.enable_rate_limiting,
)
