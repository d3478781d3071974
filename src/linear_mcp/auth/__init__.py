"""Authentication for the Linear API."""

from .credentials import (
    Credential,
    CredentialManager,
    OAuthCredential,
    StaticKey,
    TokenState,
)

__all__ = ["Credential", "CredentialManager", "OAuthCredential", "StaticKey", "TokenState"]
