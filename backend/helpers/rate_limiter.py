"""Rate limiter shared by main.py and the routers.

Kept in its own module so routers can import it without importing main.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
