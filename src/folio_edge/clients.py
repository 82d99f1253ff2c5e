"""Shared client defaults (timeouts, header markers) for the gateway."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GatewayDefaults:
    timeout_seconds: float = 30.0
    forwarded_for: str = "Stripes"


@dataclass(frozen=True, slots=True)
class GatewayPaths:
    login: str = "/authn/login"
    login_with_expiry: str = "/authn/login-with-expiry"
    users: str = "/users"
    patron_account: str = "/patron/account"
    request_policy_rules: str = "/circulation/rules/request-policy"
    request_policies: str = "/request-policy-storage/request-policies"
    instances: str = "/inventory/instances"
    requests: str = "/circulation/requests"
    service_points: str = "/service-points"


# Instances
GATEWAY = GatewayDefaults()
PATHS = GatewayPaths()

__all__ = [
    "GATEWAY",
    "PATHS",
    "GatewayDefaults",
    "GatewayPaths",
]
