"""Credential resolution and request authentication.

Credentials come from environment-style entries named after the API
namespace, for example ``PETSTORE_API_KEY`` or ``GITHUB_TOKEN``. The specs
directory may hold a ``.env`` file; process environment entries win over it.
"""

import base64
import os
import re
from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict

from ..utils.logging import get_logger

logger = get_logger("api.auth")

DEFAULT_API_KEY_HEADER = "X-API-Key"
ENV_FILE_NAME = ".env"


class AuthKind(StrEnum):
    """Supported authentication schemes."""

    BEARER = "bearer"
    API_KEY = "apiKey"
    BASIC = "basic"


class CredentialDescriptor(BaseModel):
    """Authentication material for one API namespace."""

    model_config = ConfigDict(frozen=True)

    kind: AuthKind
    token: str | None = None
    header_name: str | None = None
    username: str | None = None
    password: str | None = None


CredentialMap = dict[str, CredentialDescriptor]

# Checked in order; the first pattern that matches an entry wins. A plain
# `_TOKEN` entry mentioning BEARER anywhere else is not a credential.
_PATTERNS: tuple[tuple[re.Pattern[str], AuthKind, str], ...] = (
    (re.compile(r"^(.+)_BEARER_TOKEN$"), AuthKind.BEARER, "token"),
    (re.compile(r"^(.+)_API_KEY$"), AuthKind.API_KEY, "token"),
    (re.compile(r"^(?!.*BEARER)(.+)_TOKEN$"), AuthKind.BEARER, "token"),
    (re.compile(r"^(.+)_USERNAME$"), AuthKind.BASIC, "username"),
    (re.compile(r"^(.+)_PASSWORD$"), AuthKind.BASIC, "password"),
)


def match_credential_key(key: str) -> tuple[str, AuthKind, str] | None:
    """Map an entry name to ``(namespace, kind, field)``, if it is a credential."""
    for pattern, kind, field in _PATTERNS:
        match = pattern.match(key)
        if match:
            return match.group(1).lower(), kind, field
    return None


def resolve_credentials(entries: Mapping[str, str | None]) -> CredentialMap:
    """Build the namespace to credential map from a snapshot of entries.

    When several entries land on one namespace the first sets the kind, a
    later bearer entry switches it to bearer, and bearer is never reverted.
    Fields accumulate, so a basic descriptor may end up with only one half.

    Args:
        entries: Environment-style name/value pairs

    Returns:
        Immutable descriptors keyed by lowercased namespace
    """
    pending: dict[str, dict[str, Any]] = {}

    for key, value in entries.items():
        if not value:
            continue

        matched = match_credential_key(key)
        if matched is None:
            continue

        api_name, kind, field = matched
        record = pending.setdefault(api_name, {"kind": kind})

        if kind == AuthKind.BEARER and record["kind"] != AuthKind.BEARER:
            record["kind"] = kind

        record[field] = value

        if kind == AuthKind.API_KEY and not record.get("header_name"):
            record["header_name"] = DEFAULT_API_KEY_HEADER

    return {name: CredentialDescriptor(**record) for name, record in pending.items()}


def load_credentials(
    specs_path: Path, environ: Mapping[str, str] | None = None
) -> CredentialMap:
    """Resolve credentials from the specs directory ``.env`` and the environment.

    Args:
        specs_path: Directory that may contain a ``.env`` file
        environ: Environment snapshot; defaults to ``os.environ``

    Returns:
        Fresh credential map
    """
    entries: dict[str, str | None] = {}

    env_file = specs_path / ENV_FILE_NAME
    if env_file.is_file():
        entries.update(dotenv_values(env_file))
        logger.debug("Loaded credential file", path=str(env_file))

    entries.update(os.environ if environ is None else environ)

    credentials = resolve_credentials(entries)
    logger.debug("Resolved credentials", apis=sorted(credentials))
    return credentials


def apply_authentication(
    headers: Mapping[str, str], descriptor: CredentialDescriptor | None
) -> dict[str, str]:
    """Return a copy of ``headers`` with the descriptor's auth header applied.

    Missing descriptors and descriptors lacking required fields add nothing.
    """
    result = dict(headers)
    if descriptor is None:
        return result

    match descriptor.kind:
        case AuthKind.BEARER:
            if descriptor.token:
                result["Authorization"] = f"Bearer {descriptor.token}"
        case AuthKind.API_KEY:
            if descriptor.token and descriptor.header_name:
                result[descriptor.header_name] = descriptor.token
        case AuthKind.BASIC:
            if descriptor.username and descriptor.password:
                raw = f"{descriptor.username}:{descriptor.password}".encode()
                result["Authorization"] = f"Basic {base64.b64encode(raw).decode('ascii')}"

    return result
