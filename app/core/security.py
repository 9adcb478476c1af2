import base64
import hashlib
import re
import time
from typing import Optional

from cryptography.hazmat.primitives import serialization
from jose import jwt

ALGORITHM = "RS256"
JWT_LIFETIME_SECONDS = 60 * 60  # 1 hour, the maximum Snowflake accepts

_PEM_HEADER = re.compile(r"-----(BEGIN|END) [A-Z ]+-----")


def _ensure_pem(key: str, label: str) -> bytes:
    """
    Accept either a full PEM document or the bare base64 body.

    Bare bodies get wrapped in the given label so cryptography can parse them.
    """
    key = key.strip()
    if _PEM_HEADER.search(key):
        return key.encode()
    body = re.sub(r"\s", "", key)
    lines = "\n".join(body[i:i + 64] for i in range(0, len(body), 64))
    return f"-----BEGIN {label}-----\n{lines}\n-----END {label}-----\n".encode()


def load_private_key(private_key_pem: str):
    """Load an RSA private key (PKCS#8 or PKCS#1, unencrypted)"""
    return serialization.load_pem_private_key(
        _ensure_pem(private_key_pem, "PRIVATE KEY"),
        password=None,
    )


def private_key_to_pkcs8_pem(private_key_pem: str) -> str:
    """Normalize any accepted private key form to a PKCS#8 PEM string"""
    key = load_private_key(private_key_pem)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


def public_key_der(private_key_pem: str, public_key_pem: Optional[str] = None) -> bytes:
    """
    DER-encoded SubjectPublicKeyInfo.

    Uses the configured public key when present, otherwise derives it
    from the private key.
    """
    if public_key_pem:
        public_key = serialization.load_pem_public_key(_ensure_pem(public_key_pem, "PUBLIC KEY"))
    else:
        public_key = load_private_key(private_key_pem).public_key()
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def public_key_fingerprint(der: bytes) -> str:
    """Snowflake fingerprint: SHA256 of the DER public key, standard base64"""
    digest = hashlib.sha256(der).digest()
    return "SHA256:" + base64.b64encode(digest).decode()


def account_identifier(account: str) -> str:
    """
    Account locator as Snowflake expects it in JWT claims.

    Upper-cased, dashes become underscores, region suffix
    (anything after the first dot) dropped.
    """
    return account.upper().replace("-", "_").split(".")[0]


def qualified_username(account: str, user: str) -> str:
    return f"{account_identifier(account)}.{user.upper()}"


def keypair_claims(
    account: str,
    user: str,
    private_key_pem: str,
    public_key_pem: Optional[str] = None,
    now: Optional[int] = None,
) -> dict:
    """
    Claims of a Snowflake key-pair JWT, in wire order: iss, sub, iat, exp.

    iss is "<ACCOUNT>.<USER>.SHA256:<fingerprint>", sub is "<ACCOUNT>.<USER>".
    """
    issued_at = int(time.time()) if now is None else int(now)
    subject = qualified_username(account, user)
    fingerprint = public_key_fingerprint(public_key_der(private_key_pem, public_key_pem))

    return {
        "iss": f"{subject}.{fingerprint}",
        "sub": subject,
        "iat": issued_at,
        "exp": issued_at + JWT_LIFETIME_SECONDS,
    }


def sign_keypair_claims(claims: dict, private_key_pem: str) -> str:
    """RS256-sign claims; header {"alg":"RS256","typ":"JWT"}, unpadded URL-safe segments"""
    return jwt.encode(
        claims,
        private_key_to_pkcs8_pem(private_key_pem),
        algorithm=ALGORITHM,
        headers={"typ": "JWT"},
    )


def create_keypair_jwt(
    account: str,
    user: str,
    private_key_pem: str,
    public_key_pem: Optional[str] = None,
    now: Optional[int] = None,
) -> str:
    """
    Create a Snowflake key-pair JWT.

    Args:
        account: Snowflake account (any accepted form)
        user: Login name
        private_key_pem: Signing key
        public_key_pem: Matching public key (derived if omitted)
        now: Issue time in epoch seconds (current time if omitted)

    Returns:
        Encoded JWT
    """
    claims = keypair_claims(account, user, private_key_pem, public_key_pem, now=now)
    return sign_keypair_claims(claims, private_key_pem)
