"""
Client-side cache for a remote JSON Web Key Store.

Resolves the ``kid`` of a JWT header into the matching RSA public key
without fetching the key set on every validation:

- client / async_client: key store handles with TTL-governed caching
- fetcher: HTTP GET plus Cache-Control max-age handling
- keys: Key value type, Certs snapshot and the RSA/sig filter
- errors: typed failures (malformed response, unknown kid, bad key material)
- config, logging, metrics: settings, structlog and Prometheus plumbing

Token parsing and signature verification are left to a JWT library.
"""

from .async_client import AsyncJSONWebKeys
from .client import JSONWebKeys
from .config import DEFAULT_CACHE_AGE, JWKSConfig
from .errors import JWKSError, KeyMaterialError, KeyNotFoundError, MalformedResponseError
from .keys import Certs, JWKSDocument, Key, RSAPublicNumbers, parse_certs, with_pem_headers

__all__ = [
    "AsyncJSONWebKeys",
    "Certs",
    "DEFAULT_CACHE_AGE",
    "JSONWebKeys",
    "JWKSConfig",
    "JWKSDocument",
    "JWKSError",
    "Key",
    "KeyMaterialError",
    "KeyNotFoundError",
    "MalformedResponseError",
    "RSAPublicNumbers",
    "parse_certs",
    "with_pem_headers",
]
