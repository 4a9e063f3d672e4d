"""
Configuration for JWKS cache clients.

Values are passed in by the embedding application; nothing is read from
the environment.
"""

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Auth0 suggests about 10 hours; keys are not expected to rotate faster.
DEFAULT_CACHE_AGE = timedelta(hours=10)
DEFAULT_HTTP_TIMEOUT = 10.0


class JWKSConfig(BaseModel):
    """Settings shared by the sync and async key store clients."""

    model_config = ConfigDict(frozen=True)

    # URL of the key set, e.g. https://YOUR_DOMAIN/.well-known/jwks.json
    jwk_url: str = Field(min_length=1)

    # Used when the response carries no max-age directive.
    default_cache_age: timedelta = DEFAULT_CACHE_AGE

    # Timeout of the HTTP client built when none is supplied.
    http_timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT, gt=0)

    # Waiters that get the refresh lock reuse a snapshot installed while
    # they were queued instead of fetching again.
    collapse_refreshes: bool = True

    # Reject non-2xx responses before decoding the body.
    require_success_status: bool = False

    @field_validator("default_cache_age")
    @classmethod
    def _positive_cache_age(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("default_cache_age must be positive")
        return value
