"""Gatekeeper: bearer-token authorizer for OIDC identity providers."""

__version__ = "0.1.0"
