# Copyright 2025 The gmail-mailer Authors - SPDX-License-Identifier: Apache-2.0
"""Service-account credential provisioning.

Credentials can come from several places. Each place is a provider whose
``load()`` returns a :class:`~gmail_mailer.models.ServiceAccount` or
``None`` when its source is not configured; :func:`resolve_service_account`
walks the providers in order and stops at the first hit.

Example:
    Default resolution order::

        account = resolve_service_account([
            DirectCredentialProvider(explicit_account),
            FileCredentialProvider("./serviceaccount.json"),
            EnvPathCredentialProvider(),
            EnvJsonCredentialProvider(),
        ])
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from .logger import get_logger
from .models import ServiceAccount

SERVICE_ACCOUNT_PATH_ENV = "GMAIL_MAILER_SERVICE_ACCOUNT_PATH"
SERVICE_ACCOUNT_JSON_ENV = "GMAIL_MAILER_SERVICE_ACCOUNT"

logger = get_logger("GmailMailer.credentials")


class CredentialError(RuntimeError):
    """Raised when service-account credentials are missing or unusable."""

    def __init__(self, message: str = "Service account configuration is missing."):
        super().__init__(message)


class CredentialProvider(Protocol):
    """One source of service-account credentials."""

    def load(self) -> ServiceAccount | None: ...


def _to_service_account(data: Any, origin: str) -> ServiceAccount:
    if not isinstance(data, Mapping) or not data.get("private_key") or not data.get("client_email"):
        raise CredentialError(
            f"The service account at {origin} lacks required 'private_key' or 'client_email' fields."
        )
    try:
        return ServiceAccount.model_validate(dict(data))
    except ValidationError as exc:
        raise CredentialError(f"The service account at {origin} is invalid: {exc}") from exc


def parse_service_account_file(path: str | os.PathLike[str]) -> ServiceAccount:
    """Load and validate a service-account JSON key file.

    Args:
        path: Path to the key file, relative paths resolved from the cwd.

    Returns:
        ServiceAccount parsed from the file.

    Raises:
        CredentialError: If the file is missing, is not JSON, or lacks
            ``private_key`` / ``client_email``.
    """
    file_path = Path(path).expanduser().resolve()
    try:
        contents = file_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise CredentialError(f"File not found at provided path: '{path}'.") from exc
    except OSError as exc:
        raise CredentialError(
            f"An error occurred while reading the service account file '{path}': {exc}"
        ) from exc
    try:
        data = json.loads(contents)
    except json.JSONDecodeError as exc:
        raise CredentialError(f"Service account file at '{path}' contains invalid JSON.") from exc
    account = _to_service_account(data, f"'{path}'")
    logger.debug("Loaded service account for %s from %s", account.client_email, path)
    return account


class DirectCredentialProvider:
    """Credentials handed over by the caller, as a model or a mapping."""

    def __init__(self, service_account: ServiceAccount | Mapping[str, Any] | None):
        self._service_account = service_account

    def load(self) -> ServiceAccount | None:
        if self._service_account is None:
            return None
        if isinstance(self._service_account, ServiceAccount):
            return self._service_account
        return _to_service_account(self._service_account, "the provided mapping")


class FileCredentialProvider:
    """Credentials read from a key file path (skipped when path is empty)."""

    def __init__(self, path: str | os.PathLike[str] | None):
        self._path = path

    def load(self) -> ServiceAccount | None:
        if not self._path:
            return None
        return parse_service_account_file(self._path)


class EnvPathCredentialProvider(FileCredentialProvider):
    """Key file path taken from ``GMAIL_MAILER_SERVICE_ACCOUNT_PATH``."""

    def __init__(self, env_var: str = SERVICE_ACCOUNT_PATH_ENV):
        self._env_var = env_var
        super().__init__(None)

    def load(self) -> ServiceAccount | None:
        self._path = os.environ.get(self._env_var)
        return super().load()


class JsonCredentialProvider:
    """Key file contents given as a JSON string (skipped when empty)."""

    def __init__(self, raw: str | None, origin: str = "the provided JSON"):
        self._raw = raw
        self._origin = origin

    def load(self) -> ServiceAccount | None:
        if not self._raw:
            return None
        try:
            data = json.loads(self._raw)
        except json.JSONDecodeError as exc:
            raise CredentialError(f"Failed to parse service account from {self._origin}.") from exc
        return _to_service_account(data, self._origin)


class EnvJsonCredentialProvider(JsonCredentialProvider):
    """Key file contents inlined in ``GMAIL_MAILER_SERVICE_ACCOUNT``."""

    def __init__(self, env_var: str = SERVICE_ACCOUNT_JSON_ENV):
        self._env_var = env_var
        super().__init__(None, f"{env_var} environment variable")

    def load(self) -> ServiceAccount | None:
        self._raw = os.environ.get(self._env_var)
        return super().load()


def default_providers(
    service_account: ServiceAccount | Mapping[str, Any] | None = None,
    service_account_path: str | os.PathLike[str] | None = None,
    configured_path: str | None = None,
    configured_json: str | None = None,
) -> list[CredentialProvider]:
    """Return the standard provider chain.

    Order: explicit credentials, explicit path, configured path, path from
    the environment, configured JSON, JSON from the environment.
    """
    return [
        DirectCredentialProvider(service_account),
        FileCredentialProvider(service_account_path),
        FileCredentialProvider(configured_path),
        EnvPathCredentialProvider(),
        JsonCredentialProvider(configured_json, "the configured JSON"),
        EnvJsonCredentialProvider(),
    ]


def resolve_service_account(providers: Iterable[CredentialProvider]) -> ServiceAccount:
    """Return the credentials of the first provider that has any.

    Raises:
        CredentialError: If no provider resolves, or if a configured source
            is broken (the chain stops there).
    """
    for provider in providers:
        account = provider.load()
        if account is not None:
            logger.debug("Service account resolved by %s", type(provider).__name__)
            return account
    raise CredentialError()
