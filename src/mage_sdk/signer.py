import hashlib
import secrets
import time

from mage_sdk.errors import MageConfigurationError
from mage_sdk.types import Credential, SignedHeaders

NONCE_BYTES = 16
CONTENT_TYPE = "application/json"


def generate_nonce() -> str:
    return secrets.token_bytes(NONCE_BYTES).hex()


def compute_signature(nonce: str, timestamp: str, secret_key: str) -> str:
    return hashlib.sha1((nonce + timestamp + secret_key).encode("utf-8")).hexdigest()


def sign_headers(
    credential: Credential,
    *,
    nonce: str | None = None,
    timestamp: str | None = None,
) -> SignedHeaders:
    """Build the one-time authentication headers for a single request.

    A new nonce and timestamp are drawn on every call unless given
    explicitly, so headers must never be cached or reused.
    """
    if not credential.public_key or not credential.secret_key:
        raise MageConfigurationError("Invalid public key or secret key")

    if nonce is None:
        nonce = generate_nonce()
    if timestamp is None:
        timestamp = str(int(time.time()))

    return {
        "Api-Auth-nonce": nonce,
        "Api-Auth-pubkey": credential.public_key,
        "Api-Auth-timestamp": timestamp,
        "Api-Auth-sign": compute_signature(nonce, timestamp, credential.secret_key),
        "Content-Type": CONTENT_TYPE,
    }
