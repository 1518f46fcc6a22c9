# pixlee_export/utils/security.py
import base64
import hashlib
import hmac
import json
import secrets
from typing import Any


def serialize_payload(payload: Any) -> str:
    """JSON body exactly as it is sent and signed"""
    return json.dumps(payload, separators=(",", ":"), default=str)


def generate_payload_signature(payload: Any, secret_key: str) -> str:
    """Base64 HMAC-SHA256 signature of a payload"""
    digest = hmac.new(
        secret_key.encode(),
        serialize_payload(payload).encode(),
        hashlib.sha256
    ).digest()

    return base64.b64encode(digest).decode()


def generate_job_id() -> str:
    """Unique id reported with export status notifications"""
    return secrets.token_hex(6)
