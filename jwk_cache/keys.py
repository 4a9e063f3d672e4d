"""
JSON Web Key value types and the key set snapshot built from them.

Only the subset of RFC 7517 served by Auth0-style key stores is modelled:
RSA signing keys with their certificate chain in ``x5c``.
"""

from __future__ import annotations

import binascii
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Any, List, Mapping, NamedTuple, Optional, Tuple

from jose import jwk
from jose.exceptions import JWKError
from jose.utils import base64url_decode
from pydantic import BaseModel, ConfigDict, field_validator

from .errors import KeyMaterialError
from .logging import get_logger

logger = get_logger("jwk_cache.keys")

PEM_HEADER = "-----BEGIN CERTIFICATE-----\n"
PEM_FOOTER = "\n-----END CERTIFICATE-----"

_BASE64URL = re.compile(r"[A-Za-z0-9_-]+")


def with_pem_headers(body: str) -> str:
    """Wrap a base64 DER certificate in PEM envelope lines."""
    return PEM_HEADER + body + PEM_FOOTER


class RSAPublicNumbers(NamedTuple):
    """RSA public key as plain integers."""

    n: int
    e: int


def _decode_int(name: str, value: str) -> int:
    if not value or not _BASE64URL.fullmatch(value):
        raise KeyMaterialError(
            f"RSA {name} is not unpadded base64url",
            details={"field": name},
        )
    try:
        raw = base64url_decode(value.encode("ascii"))
    except (binascii.Error, ValueError) as exc:
        raise KeyMaterialError(
            f"RSA {name} could not be decoded",
            details={"field": name, "error": str(exc)},
        ) from exc
    return int.from_bytes(raw, "big")


class Key(BaseModel):
    """A single JSON Web Key as published by the key store."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    # alg is carried along but not interpreted: only RSA is supported
    alg: str = ""
    kty: str = ""
    kid: str = ""
    use: str = ""
    n: str = ""
    e: str = ""
    x5c: Tuple[str, ...] = ()

    @field_validator("alg", "kty", "kid", "use", "n", "e", mode="before")
    @classmethod
    def _null_string(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("x5c", mode="before")
    @classmethod
    def _null_chain(cls, value: Any) -> Any:
        return () if value is None else value

    @property
    def empty(self) -> bool:
        """True for a zero-value key with no algorithm."""
        return self.alg == ""

    @property
    def is_rsa_signing_key(self) -> bool:
        return self.use == "sig" and self.kty == "RSA"

    def pem(self) -> str:
        """Return the leaf certificate with PEM headers, or "" without one."""
        if not self.x5c:
            return ""
        return with_pem_headers(self.x5c[0])

    def rsa(self) -> RSAPublicNumbers:
        """Decode the modulus and exponent.

        Raises:
            KeyMaterialError: if ``n`` or ``e`` is missing or not base64url.
        """
        return RSAPublicNumbers(
            n=_decode_int("modulus", self.n),
            e=_decode_int("exponent", self.e),
        )

    def to_jwk(self):
        """Build a python-jose key object usable by ``jose.jwt.decode``."""
        if self.kty == "RSA":
            self.rsa()
        try:
            return jwk.construct(self.model_dump(), algorithm=self.alg or "RS256")
        except (JWKError, binascii.Error, ValueError) as exc:
            raise KeyMaterialError(
                "Key could not be constructed",
                details={"kid": self.kid, "error": str(exc)},
            ) from exc


class JWKSDocument(BaseModel):
    """Decoded JSON Web Key Set response body."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    keys: Tuple[Key, ...] = ()

    @field_validator("keys", mode="before")
    @classmethod
    def _null_keys(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, list):
            # null entries decode as zero-value keys, dropped later by the filter
            return [{} if entry is None else entry for entry in value]
        return value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Certs:
    """Immutable snapshot of the usable signing keys, indexed by kid."""

    keys: Mapping[str, Key] = field(default_factory=lambda: MappingProxyType({}))
    expiry: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if not isinstance(self.keys, MappingProxyType):
            object.__setattr__(self, "keys", MappingProxyType(dict(self.keys)))

    def __len__(self) -> int:
        return len(self.keys)

    def __contains__(self, kid: object) -> bool:
        return kid in self.keys

    def to_list(self) -> List[Key]:
        """Return the keys as a list."""
        return list(self.keys.values())

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or _utcnow()) >= self.expiry


def parse_certs(document: JWKSDocument, cache_age: timedelta) -> Certs:
    """Keep the RSA signing keys of ``document`` and stamp them with an expiry.

    Keys of other types or uses are dropped; with duplicated kids the last
    one wins.
    """
    keys = {}
    for key in document.keys:
        if key.is_rsa_signing_key:
            keys[key.kid] = key
        else:
            logger.debug("Skipping unsupported key", kid=key.kid, kty=key.kty, use=key.use)

    return Certs(keys=keys, expiry=_utcnow() + cache_age)
