import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..config import Settings, get_settings
from ..deps import get_mailer_factory, get_secret_store
from ..domain.results import NotificationFailed
from ..infrastructure.secrets import SecretStore
from ..usecases import notifications as notification_usecase
from ..usecases.notifications import MailerFactory

router = APIRouter(prefix="/notifications", tags=["notifications"])


async def _read_json(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return {}
    return json.loads(raw)


# Every verb is routed here so that wrong methods get the same JSON error shape.
@router.api_route("/reservation-confirmation", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def send_reservation_confirmation(
    request: Request,
    secret_store: SecretStore = Depends(get_secret_store),
    mailer_factory: MailerFactory = Depends(get_mailer_factory),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    body: Any = None
    if request.method == "POST":
        try:
            body = await _read_json(request)
        except (json.JSONDecodeError, UnicodeDecodeError):
            failed = NotificationFailed(status_code=400, error="Request body must be valid JSON")
            return JSONResponse(status_code=failed.status_code, content=failed.to_body())

    result = await notification_usecase.send_reservation_confirmation(
        request.method,
        body,
        secret_store=secret_store,
        mailer_factory=mailer_factory,
        settings=settings,
    )
    return JSONResponse(status_code=result.status_code, content=result.to_body())
