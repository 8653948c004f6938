from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from bragger.config import settings

# Default limit applies to every route through SlowAPIMiddleware; the health
# probe opts out with ``@limiter.exempt``.
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT])
