from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Mapping

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="
UNSIGNED_ENVS = frozenset({"dev", "local", "test"})


def sign_body(body: bytes, app_secret: str) -> str:
    """The X-Hub-Signature-256 value Meta sends for this body."""
    return SIGNATURE_PREFIX + hmac.new(app_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_get_request(params: Mapping[str, str], expected_token: str) -> str | None:
    """Return hub.challenge when the subscription handshake carries our verify token."""
    if not expected_token or params.get("hub.mode") != "subscribe":
        return None
    token = params.get("hub.verify_token") or ""
    if not hmac.compare_digest(token, expected_token):
        return None
    return params.get("hub.challenge")


def verify_post_signature(body: bytes, signature_header: str | None, app_secret: str | None, env: str) -> bool:
    if not signature_header:
        if env.lower() in UNSIGNED_ENVS:
            logger.warning("Unsigned webhook accepted", extra={"env": env})
            return True
        logger.warning("Unsigned webhook rejected")
        return False

    if not app_secret:
        logger.error("WHATSAPP_APP_SECRET missing, cannot check webhook signature")
        return False

    if not signature_header.lower().startswith(SIGNATURE_PREFIX):
        return False
    return hmac.compare_digest(sign_body(body, app_secret), SIGNATURE_PREFIX + signature_header[len(SIGNATURE_PREFIX):])
