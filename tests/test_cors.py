from __future__ import annotations

import pytest

from auth_proxy.cors import ALLOWED_METHODS, MAX_AGE_SECONDS, CorsPolicy
from auth_proxy.settings import DEFAULT_CORS_ORIGINS


def test_allow_listed_origin_is_echoed() -> None:
    policy = CorsPolicy(DEFAULT_CORS_ORIGINS)
    assert policy.allow_origin("http://localhost:3000") == "http://localhost:3000"
    assert policy.allow_origin("https://host.plasmicdev.com") == "https://host.plasmicdev.com"


@pytest.mark.parametrize("origin", [None, "", "https://evil.example", "http://localhost:3001"])
def test_unknown_or_missing_origin_falls_back_to_primary(origin: str | None) -> None:
    policy = CorsPolicy(DEFAULT_CORS_ORIGINS)
    assert policy.allow_origin(origin) == "https://apps.simplesalt.company"


def test_origin_comparison_is_exact() -> None:
    policy = CorsPolicy(["https://apps.simplesalt.company", "https://studio.plasmic.app"])
    assert policy.allow_origin("https://studio.plasmic.app/") == "https://apps.simplesalt.company"
    assert policy.allow_origin("HTTPS://STUDIO.PLASMIC.APP") == "https://apps.simplesalt.company"


def test_headers_carry_fixed_policy() -> None:
    headers = CorsPolicy(DEFAULT_CORS_ORIGINS).headers_for("https://studio.plasmic.app")
    assert headers["Access-Control-Allow-Origin"] == "https://studio.plasmic.app"
    assert headers["Access-Control-Allow-Methods"] == ALLOWED_METHODS
    assert "CF-Access-Jwt-Assertion" in headers["Access-Control-Allow-Headers"]
    assert "X-Original-URL" in headers["Access-Control-Allow-Headers"]
    assert headers["Access-Control-Max-Age"] == str(MAX_AGE_SECONDS) == "86400"
    assert headers["Access-Control-Allow-Credentials"] == "true"
    assert "*" not in headers.values()


def test_empty_allow_list_is_rejected() -> None:
    with pytest.raises(ValueError):
        CorsPolicy([])


def test_headers_are_stable_for_a_fixed_origin() -> None:
    policy = CorsPolicy(DEFAULT_CORS_ORIGINS)
    assert policy.headers_for("http://localhost:3000") == policy.headers_for("http://localhost:3000")
