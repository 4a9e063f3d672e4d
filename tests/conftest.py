"""
Shared fixtures for the JWKS cache tests.
"""

import json
import threading
from typing import Any, Dict, List, Optional

import httpx
import pytest

TEST_KID = "QzQ4QzExMzNENkJCMThDNjNCN0ZEQjQwQkEwNUFFMzY1NDU5QzcxNA"
TEST_X5C = (
    "MIIDCzCCAfOgAwIBAgIJDLLYwRgUea6sMA0GCSqGSIb3DQEBCwUAMCMxITAfBgNVBAMTGHRvcHNvbHV0aW9uLmV1LmF1dGgwLmNvbTAeFw0x"
    "ODEwMTExNTQwMzBaFw0zMjA2MTkxNTQwMzBaMCMxITAfBgNVBAMTGHRvcHNvbHV0aW9uLmV1LmF1dGgwLmNvbTCCASIwDQYJKoZIhvcNAQEB"
    "BQADggEPADCCAQoCggEBAN5PN+xxZOmFWWztp3xFNjnjCTMAu+ZBSCj9h5do6VUt22uPlshjAWCA9BnrbBMhdGR38Eg8XXpMntvXFJvw9I0d"
    "vqdmbBY/dM7TwDc8rOz4qsXCtuJSnhrOex/FemdsZ15hs3LAHfddKKo8tZ2Hs1fX+K90YdFMURopjjL9F1jXGGvIs1Zi9yZTKYOVFbX0Bykz"
    "T9JkSx44T7puvzUqmBUJyrdpXalouNuE6iruFm7WdlMoK2LOi9yCAwUa5eNMgLxRnQbk6QvCvgnBfWcTQ6n4Y3UzK+RgJ28UGRhs03m9Pfov"
    "9kov7ZSruinG20inQ9xeSbBxCHNy3r0RSkiz9XcCAwEAAaNCMEAwDwYDVR0TAQH/BAUwAwEB/zAdBgNVHQ4EFgQU6wLAfnF3rypEQML/n6Bm"
    "poggxfowDgYDVR0PAQH/BAQDAgKEMA0GCSqGSIb3DQEBCwUAA4IBAQCcvCc1chcjFcQ75PtcTqC9AiDrmryJWyj9apXbAwaTV47KAkN5PvA1"
    "4OKcQBTlJZXRcRq/QAimMLZna3au6lsr+/SkeqE2n26j9eG3ZUYb8HQ+mHKMzsqcBTMLFsMeQ0f7Y18EakYu6kGE79jdgjr96TuurTwMKxc2"
    "dbkivSs3Zi+fQoZrjQ0EqNuCCNiZUA9MbcHrYB18mk31RvMVARJMdY+eQeeR2rSFoSDnn/DO4Oy745c/VOIq7Cigh/GAdH2M5+Jv6SalqH2O"
    "iwMlfH72pyd6j+OjfwtI6cyY8BRV4itNCvp2Pf9wyUPjm1Lq7YAVWHySNDPKao2OVn9Af4/A"
)
TEST_N = (
    "3k837HFk6YVZbO2nfEU2OeMJMwC75kFIKP2Hl2jpVS3ba4-WyGMBYID0GetsEyF0ZHfwSDxdekye29cUm_D0jR2-p2ZsFj90ztPANzys7Piq"
    "xcK24lKeGs57H8V6Z2xnXmGzcsAd910oqjy1nYezV9f4r3Rh0UxRGimOMv0XWNcYa8izVmL3JlMpg5UVtfQHKTNP0mRLHjhPum6_NSqYFQnK"
    "t2ldqWi424TqKu4WbtZ2UygrYs6L3IIDBRrl40yAvFGdBuTpC8K-CcF9ZxNDqfhjdTMr5GAnbxQZGGzTeb09-i_2Si_tlKu6KcbbSKdD3F5J"
    "sHEIc3LevRFKSLP1dw"
)

JWKS_URL = "https://tenant.example.com/.well-known/jwks.json"


class JWKSServer:
    """httpx mock transport handler serving a fixed key set."""

    def __init__(self, payload: Any, headers: Optional[Dict[str, str]] = None,
                 status_code: int = 200):
        self.payload = payload
        self.headers = headers or {}
        self.status_code = status_code
        self.requests: List[httpx.Request] = []
        self._lock = threading.Lock()

    @property
    def calls(self) -> int:
        with self._lock:
            return len(self.requests)

    def _record(self, request: httpx.Request):
        with self._lock:
            self.requests.append(request)

    def _response(self) -> httpx.Response:
        if isinstance(self.payload, (bytes, str)):
            content = self.payload
        else:
            content = json.dumps(self.payload)
        return httpx.Response(self.status_code, headers=self.headers, content=content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self._record(request)
        return self._response()


@pytest.fixture
def test_key_data() -> Dict[str, Any]:
    """A real Auth0 RSA signing key."""
    return {
        "alg": "RS256",
        "kty": "RSA",
        "use": "sig",
        "n": TEST_N,
        "e": "AQAB",
        "kid": TEST_KID,
        "x5c": [TEST_X5C],
    }


@pytest.fixture
def jwks_payload(test_key_data) -> Dict[str, Any]:
    """Key set mixing a usable key with ones that must be filtered out."""
    return {
        "keys": [
            test_key_data,
            {"alg": "ES256", "kty": "EC", "use": "sig", "kid": "ec-key", "x": "abc", "y": "def"},
            {"alg": "RSA-OAEP", "kty": "RSA", "use": "enc", "kid": "enc-key", "n": TEST_N, "e": "AQAB"},
        ]
    }


@pytest.fixture
def jwks_server(jwks_payload) -> JWKSServer:
    return JWKSServer(jwks_payload, headers={"cache-control": "public, max-age=10800"})


@pytest.fixture
def http_client(jwks_server):
    client = httpx.Client(transport=httpx.MockTransport(jwks_server))
    yield client
    client.close()
