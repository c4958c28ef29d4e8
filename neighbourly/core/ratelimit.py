# File: neighbourly/core/ratelimit.py
# Project: neighbourly

from slowapi import Limiter
from slowapi.util import get_remote_address
from neighbourly.core.config import settings

# claim/unclaim are keyed per client address; RATE_LIMIT_ENABLED=false turns it off
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
CLAIM_RATE = settings.claim_rate_limit
