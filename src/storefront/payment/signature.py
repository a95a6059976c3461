"""Webhook signature verification for provider notifications.

The provider signs each notification with HMAC-SHA256 over the manifest
``id:{data.id};request-id:{x-request-id};ts:{ts};`` and sends the result in
the ``x-signature`` header as ``ts=<timestamp>,v1=<hex digest>``.
"""

import hashlib
import hmac

import structlog

logger = structlog.get_logger(__name__)


def parse_signature_header(header: str | None) -> dict[str, str]:
    """Split ``ts=...,v1=...`` into its parts. Unknown or malformed parts are dropped."""
    parts: dict[str, str] = {}
    if not header:
        return parts

    for chunk in header.split(","):
        key, sep, value = chunk.partition("=")
        if sep and key.strip() and value.strip():
            parts[key.strip()] = value.strip()
    return parts


def build_manifest(resource_id: str, request_id: str, ts: str) -> str:
    return f"id:{resource_id};request-id:{request_id};ts:{ts};"


def compute_signature(secret: str, manifest: str) -> str:
    return hmac.new(secret.encode("utf-8"), manifest.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_signature(
    secret: str,
    signature_header: str | None,
    request_id: str | None,
    resource_id: str | None,
) -> bool:
    """Return True when the header carries a valid signature for this notification.

    A missing header, request id, resource id, timestamp or digest is a
    failed verification.
    """
    parts = parse_signature_header(signature_header)
    ts = parts.get("ts")
    received = parts.get("v1")

    if not (ts and received and request_id and resource_id):
        logger.warning(
            "webhook_signature_incomplete",
            has_ts=bool(ts),
            has_v1=bool(received),
            has_request_id=bool(request_id),
            has_resource_id=bool(resource_id),
        )
        return False

    expected = compute_signature(secret, build_manifest(str(resource_id), request_id, ts))
    return hmac.compare_digest(expected, received)
