from typing import AsyncIterator

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings, get_settings
from .database import async_session
from .infrastructure.mailer import Mailer, ResendMailer
from .infrastructure.secrets import AwsSecretsManagerStore, EnvSecretStore, SecretStore
from .usecases.notifications import MailerFactory
from .utils.auth import decode_staff_token


async def get_session() -> AsyncIterator[AsyncSession]:
    async with async_session() as session:
        yield session


async def get_current_staff_id(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> int:
    challenge = {"WWW-Authenticate": "Bearer"}
    if authorization is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authorization header required", headers=challenge)
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Bearer token required", headers=challenge)
    try:
        return decode_staff_token(token, secret=settings.auth_secret, algorithms=[settings.auth_algorithm])
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc), headers=challenge) from exc


def get_secret_store(settings: Settings = Depends(get_settings)) -> SecretStore:
    if settings.secret_backend == "aws":
        return AwsSecretsManagerStore(region=settings.aws_region, prefix=settings.secret_prefix)
    return EnvSecretStore(prefix=settings.secret_prefix)


def get_mailer_factory(settings: Settings = Depends(get_settings)) -> MailerFactory:
    def factory(api_key: str) -> Mailer:
        return ResendMailer(api_key, base_url=settings.mail_api_url, timeout=settings.mail_timeout_seconds)

    return factory
