from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class NotificationSent:
    email_id: str
    message: str = "Confirmation email sent successfully"
    status_code: int = 200
    success: bool = True

    def to_body(self) -> dict[str, Any]:
        return {"success": True, "message": self.message, "emailId": self.email_id}


@dataclass(frozen=True)
class NotificationFailed:
    status_code: int
    error: str
    success: bool = False

    def to_body(self) -> dict[str, Any]:
        return {"success": False, "error": self.error}


NotificationResult = Union[NotificationSent, NotificationFailed]
