"""Bearer token settings."""

from server.settings.components import config

TOKEN_LIFETIME_HOURS = config('TOKEN_LIFETIME_HOURS', cast=int, default=24)

# Compare expires_at on every validation instead of relying on the sweep
TOKEN_ENFORCE_EXPIRY = config('TOKEN_ENFORCE_EXPIRY', cast=bool, default=False)

# Weekly sweep: Monday is 0, Sunday is 6; hour in local TIME_ZONE
TOKEN_SWEEP_WEEKDAY = config('TOKEN_SWEEP_WEEKDAY', cast=int, default=6)
TOKEN_SWEEP_HOUR = config('TOKEN_SWEEP_HOUR', cast=int, default=0)

# Skip bearer token resolution; entries ending with a slash match as prefixes
TOKEN_AUTH_EXEMPT_PATHS = (
    '/login',
    '/admin/',
    '/static/',
)
