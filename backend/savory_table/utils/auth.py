from datetime import datetime, timedelta, timezone
from typing import Sequence

import jwt
from jwt import InvalidTokenError

STAFF_ROLE = "staff"


def create_staff_token(
    *,
    staff_id: int,
    secret: str,
    algorithm: str = "HS256",
    expires_delta: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(hours=8))
    payload = {"sub": str(staff_id), "role": STAFF_ROLE, "iat": now, "exp": exp}
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_staff_token(
    token: str,
    *,
    secret: str,
    algorithms: Sequence[str],
) -> int:
    """Return the staff id carried by a valid, unexpired staff token."""
    try:
        payload = jwt.decode(token, secret, algorithms=list(algorithms))
    except InvalidTokenError as exc:  # includes ExpiredSignatureError
        raise ValueError("invalid token") from exc

    if payload.get("role") != STAFF_ROLE:
        raise ValueError("token is not a staff token")
    sub = payload.get("sub")
    if sub is None:
        raise ValueError("token missing sub")
    try:
        return int(sub)
    except (TypeError, ValueError) as exc:
        raise ValueError("token sub is not an integer") from exc
