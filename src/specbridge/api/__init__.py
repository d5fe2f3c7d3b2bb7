"""Outbound API calls: credentials and request execution."""

from .auth import (
    AuthKind,
    CredentialDescriptor,
    CredentialMap,
    apply_authentication,
    load_credentials,
    resolve_credentials,
)
from .client import RequestExecutor, format_error_response, format_response

__all__ = [
    "AuthKind",
    "CredentialDescriptor",
    "CredentialMap",
    "RequestExecutor",
    "apply_authentication",
    "format_error_response",
    "format_response",
    "load_credentials",
    "resolve_credentials",
]
