from __future__ import annotations

import asyncio
import logging
import os
from typing import Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class SecretStore(Protocol):
    async def get_secret(self, name: str) -> Optional[str]: ...


class EnvSecretStore:
    """Reads secrets from process environment variables."""

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix

    async def get_secret(self, name: str) -> Optional[str]:
        value = os.getenv(f"{self.prefix}{name}")
        return value or None


class AwsSecretsManagerStore:
    """Reads secrets from AWS Secrets Manager. Missing or unreadable secrets resolve to None."""

    def __init__(self, *, region: str, prefix: str = "", client: object | None = None) -> None:
        self.prefix = prefix
        self._client = client or boto3.client("secretsmanager", region_name=region)

    async def get_secret(self, name: str) -> Optional[str]:
        return await asyncio.to_thread(self._fetch, f"{self.prefix}{name}")

    def _fetch(self, secret_id: str) -> Optional[str]:
        try:
            response = self._client.get_secret_value(SecretId=secret_id)  # type: ignore[attr-defined]
        except (BotoCoreError, ClientError) as exc:
            logger.warning("secret lookup failed for %s: %s", secret_id, exc)
            return None
        return response.get("SecretString") or None
