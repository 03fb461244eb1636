"""
Bearer token inspection without signature verification.

The identity service is the only authority on whether a token is valid; the
session middleware delegates that decision to it. This module only reads an
advisory hint (the ``_id`` claim) out of the token payload, so the decode here
is deliberately *unverified* and must never back an authorization decision.
"""

from __future__ import annotations

import re
from typing import Any
from uuid import UUID, uuid4

import jwt

from gateway_service_libs.error_handling import (
    raise_claim_invalid,
    raise_claim_missing,
    raise_malformed_token,
)
from gateway_service_libs.logging_utils import create_service_logger
from services.session_gateway_service.models.identity import BearerToken, UserId

logger = create_service_logger("session_gateway.token_inspector")

SERVICE = "session_gateway_service"
BEARER_SCHEME = "bearer"
USER_ID_CLAIM = "_id"

_USER_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")


def strip_bearer_prefix(raw: str, correlation_id: UUID | None = None) -> BearerToken:
    """Strip a case-insensitive ``Bearer`` scheme and return the token.

    ``"Bearer xyz"``, ``"bearer  xyz"`` and ``" BEARER xyz"`` all yield ``xyz``.
    """
    correlation_id = correlation_id or uuid4()
    value = (raw or "").strip()
    if not value:
        raise_malformed_token(
            service=SERVICE,
            operation="strip_bearer_prefix",
            message="No authorization value found",
            correlation_id=correlation_id,
            reason="empty_token",
        )

    if not value.lower().startswith(BEARER_SCHEME):
        raise_malformed_token(
            service=SERVICE,
            operation="strip_bearer_prefix",
            message="Authorization value does not use the Bearer scheme",
            correlation_id=correlation_id,
            reason="missing_scheme",
        )

    remainder = value[len(BEARER_SCHEME) :]
    if not remainder or not remainder[0].isspace():
        raise_malformed_token(
            service=SERVICE,
            operation="strip_bearer_prefix",
            message="Invalid token format",
            correlation_id=correlation_id,
            reason="missing_separator",
        )

    parts = remainder.split()
    if not parts:
        raise_malformed_token(
            service=SERVICE,
            operation="strip_bearer_prefix",
            message="Bearer scheme without a token",
            correlation_id=correlation_id,
            reason="empty_token",
        )
    if len(parts) != 1:
        raise_malformed_token(
            service=SERVICE,
            operation="strip_bearer_prefix",
            message="Invalid token format",
            correlation_id=correlation_id,
            reason="wrong_part_count",
        )

    return BearerToken(parts[0])


def decode_unverified_claims(token: str, correlation_id: UUID | None = None) -> dict[str, Any]:
    """Decode the payload segment of a JWT without checking its signature.

    The returned claims are untrusted. No expiry, audience or issuer checks
    are performed either.
    """
    correlation_id = correlation_id or uuid4()
    if not token:
        raise_malformed_token(
            service=SERVICE,
            operation="decode_unverified_claims",
            message="Token is empty",
            correlation_id=correlation_id,
            reason="empty_token",
        )

    segment_count = len(token.split("."))
    if segment_count != 3:
        raise_malformed_token(
            service=SERVICE,
            operation="decode_unverified_claims",
            message=f"Token must have 3 segments, got {segment_count}",
            correlation_id=correlation_id,
            reason="wrong_part_count",
        )

    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        logger.debug("Unverified token decode failed", error=str(e))
        raise_malformed_token(
            service=SERVICE,
            operation="decode_unverified_claims",
            message=f"Error parsing token: {e}",
            correlation_id=correlation_id,
            reason="undecodable_token",
        )

    if not isinstance(claims, dict):
        raise_malformed_token(
            service=SERVICE,
            operation="decode_unverified_claims",
            message="Token payload is not a claims object",
            correlation_id=correlation_id,
            reason="undecodable_token",
        )
    return claims


def parse_user_id(value: str, correlation_id: UUID | None = None) -> UserId:
    """Parse a 24-hex-character identifier strictly."""
    if not _USER_ID_PATTERN.fullmatch(value):
        raise_claim_invalid(
            service=SERVICE,
            operation="parse_user_id",
            claim_name=USER_ID_CLAIM,
            message="Invalid user identifier format",
            correlation_id=correlation_id or uuid4(),
            reason="invalid_identifier_format",
        )
    return UserId(value.lower())


def extract_user_id(raw: str, correlation_id: UUID | None = None) -> UserId:
    """Extract the advisory user identifier from an Authorization value.

    A leading Bearer scheme is stripped when present; otherwise the whole
    value is treated as the token.
    """
    correlation_id = correlation_id or uuid4()
    value = (raw or "").strip()
    if not value:
        raise_malformed_token(
            service=SERVICE,
            operation="extract_user_id",
            message="No authorization value found",
            correlation_id=correlation_id,
            reason="empty_token",
        )

    token: str = value
    if value.lower().startswith(BEARER_SCHEME):
        token = strip_bearer_prefix(value, correlation_id)

    claims = decode_unverified_claims(token, correlation_id)

    if USER_ID_CLAIM not in claims:
        raise_claim_missing(
            service=SERVICE,
            operation="extract_user_id",
            claim_name=USER_ID_CLAIM,
            message=f"{USER_ID_CLAIM} not found in token claims",
            correlation_id=correlation_id,
        )

    claim = claims[USER_ID_CLAIM]
    if not isinstance(claim, str):
        raise_claim_invalid(
            service=SERVICE,
            operation="extract_user_id",
            claim_name=USER_ID_CLAIM,
            message="User identifier claim is not a string",
            correlation_id=correlation_id,
            reason="not_a_string",
        )

    return parse_user_id(claim, correlation_id)
