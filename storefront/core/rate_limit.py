"""Shared slowapi limiter, registered on the app in storefront.main"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from storefront.config import settings

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT_PER_MINUTE])
