# Copyright 2025 The gmail-mailer Authors - SPDX-License-Identifier: Apache-2.0
"""Configuration loader for gmail-mailer.

This module provides utilities for loading mailer settings from
INI-style configuration files or environment variables.

Example:
    Configuration file format (config.ini)::

        [gmail]
        sender_email = noreply@example.com
        service_account_path = /etc/gmail-mailer/serviceaccount.json
        api_base_url = https://gmail.googleapis.com
        token_uri = https://oauth2.googleapis.com/token
        timeout = 30

    Loading the configuration::

        config = load_mailer_config("/etc/gmail-mailer/config.ini")
        # Returns MailerConfig dataclass
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path

from .logger import get_logger
from .transport import DEFAULT_TIMEOUT, GMAIL_API_BASE_URL

DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass(frozen=True)
class MailerConfig:
    """Settings for the mailer and its collaborators.

    The object is immutable; it is read once and handed to ``GmailMailer``.

    Attributes:
        sender_email: Default sender address.
        service_account_path: Path to a service-account key file.
        service_account_json: Inline service-account JSON.
        api_base_url: Gmail API root URL.
        token_uri: OAuth token endpoint override.
        timeout: HTTP timeout in seconds.
    """

    sender_email: str | None = None
    service_account_path: str | None = None
    service_account_json: str | None = None
    api_base_url: str = GMAIL_API_BASE_URL
    token_uri: str = DEFAULT_TOKEN_URI
    timeout: float = DEFAULT_TIMEOUT


logger = get_logger("GmailMailer.config")


def load_mailer_config(config_path: str | None = None) -> MailerConfig:
    """Load mailer configuration from config file or environment.

    Priority: config file > environment variables > defaults.

    Environment variables:
        GMAIL_USER: Default sender address
        GMAIL_MAILER_SERVICE_ACCOUNT_PATH: Path to the key file
        GMAIL_MAILER_SERVICE_ACCOUNT: Inline key file JSON
        GMAIL_MAILER_API_BASE_URL: Gmail API root URL
        GMAIL_MAILER_TOKEN_URI: OAuth token endpoint
        GMAIL_MAILER_TIMEOUT: HTTP timeout in seconds

    Args:
        config_path: Optional path to config.ini file

    Returns:
        MailerConfig with parsed settings, using defaults for missing values.
    """
    config_values: dict = {}

    env_mapping = {
        "sender_email": ("GMAIL_USER", str, None),
        "service_account_path": ("GMAIL_MAILER_SERVICE_ACCOUNT_PATH", str, None),
        "service_account_json": ("GMAIL_MAILER_SERVICE_ACCOUNT", str, None),
        "api_base_url": ("GMAIL_MAILER_API_BASE_URL", str, GMAIL_API_BASE_URL),
        "token_uri": ("GMAIL_MAILER_TOKEN_URI", str, DEFAULT_TOKEN_URI),
        "timeout": ("GMAIL_MAILER_TIMEOUT", float, DEFAULT_TIMEOUT),
    }

    for key, (env_var, type_fn, default) in env_mapping.items():
        env_value = os.environ.get(env_var)
        if env_value:
            try:
                config_values[key] = type_fn(env_value)
            except (ValueError, TypeError):
                logger.warning(f"Invalid value for {env_var}, using default")
                config_values[key] = default
        else:
            config_values[key] = default

    if config_path and Path(config_path).exists():
        config = configparser.ConfigParser()
        config.read(config_path)

        if config.has_section("gmail"):
            def get_float(key: str, default: float) -> float:
                try:
                    return config.getfloat("gmail", key, fallback=default)
                except ValueError:
                    logger.warning(f"Invalid value for [gmail] {key}, using default")
                    return default

            def get_str(key: str, default: str | None = None) -> str | None:
                value = config.get("gmail", key, fallback=default)
                return value.strip() if value else default

            config_values["sender_email"] = get_str("sender_email", config_values["sender_email"])
            config_values["service_account_path"] = get_str(
                "service_account_path", config_values["service_account_path"]
            )
            config_values["api_base_url"] = get_str("api_base_url", config_values["api_base_url"])
            config_values["token_uri"] = get_str("token_uri", config_values["token_uri"])
            config_values["timeout"] = get_float("timeout", config_values["timeout"])
    elif config_path:
        logger.warning(f"Config file {config_path} not found, using environment and defaults")

    return MailerConfig(**config_values)
