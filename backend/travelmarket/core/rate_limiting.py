"""
Rate limiting for the credential endpoints (slowapi, in-memory counters).

slowapi binds ``@limiter.limit`` when the route module is imported, so the
limiter and its limit string live at module level. ``create_app`` applies the
application's Settings through ``configure_rate_limiting`` and publishes the
limiter on ``app.state``; the most recently created app's settings win.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from travelmarket.core.settings import Settings

limiter = Limiter(key_func=get_remote_address)

_auth_limit = Settings.model_fields["RATE_LIMIT_AUTH"].default


def auth_limit() -> str:
    return _auth_limit


def configure_rate_limiting(settings: Settings) -> Limiter:
    global _auth_limit
    _auth_limit = settings.RATE_LIMIT_AUTH
    limiter.enabled = settings.ENABLE_RATE_LIMITING
    return limiter
