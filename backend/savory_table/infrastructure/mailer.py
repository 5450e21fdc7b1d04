from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

import httpx

from ..domain.errors import ProviderError


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: str  # base64


class Mailer(Protocol):
    async def send(
        self,
        *,
        sender: str,
        to: str,
        subject: str,
        html: str,
        attachments: Sequence[Attachment],
    ) -> str: ...


class ResendMailer:
    """Sends mail through the Resend REST API. Returns the provider message id."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.resend.com",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def send(
        self,
        *,
        sender: str,
        to: str,
        subject: str,
        html: str,
        attachments: Sequence[Attachment],
    ) -> str:
        payload = {
            "from": sender,
            "to": [to],
            "subject": subject,
            "html": html,
            "attachments": [{"filename": a.filename, "content": a.content} for a in attachments],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            if self._client is not None:
                response = await self._client.post(f"{self.base_url}/emails", json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(f"{self.base_url}/emails", json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise ProviderError(f"mail provider request failed: {exc}") from exc

        if response.is_error:
            raise ProviderError(f"mail provider rejected message: {response.status_code} {response.text}")
        try:
            message_id = response.json().get("id")
        except ValueError as exc:
            raise ProviderError("mail provider returned invalid JSON") from exc
        if not message_id:
            raise ProviderError("mail provider response missing id")
        return str(message_id)
