"""
Warehouse access (authentication)
"""
from app.pipeline.warehouse.auth import (
    CredentialProvider,
    KeyPairCredentialProvider,
    SessionLoginCredentialProvider,
    build_providers,
)

__all__ = [
    "CredentialProvider",
    "KeyPairCredentialProvider",
    "SessionLoginCredentialProvider",
    "build_providers",
]
