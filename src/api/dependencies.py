"""
FastAPI dependencies - Dependency injection factories.

This module wires infrastructure adapters into the domain service at
startup and provides Depends() factories for injecting it into routes.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.outbox import OutboxEmailSender
from src.adapters.smtp.sender import SmtpEmailSender
from src.config.settings import Settings
from src.domain.accounts import AccountService
from src.domain.credentials import PasswordHasher, TokenIssuer
from src.domain.otp import OtpIssuer
from src.domain.ports import AccountRepository, EmailSender


def build_email_sender(settings: Settings) -> EmailSender:
    """SMTP when a host is configured, else the outbox directory, else console logging."""
    if not settings.smtp_host:
        if settings.mail_outbox_dir:
            return OutboxEmailSender(settings.mail_outbox_dir, sender=settings.mail_from)
        return ConsoleEmailSender()
    return SmtpEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
        timeout=settings.smtp_timeout_seconds,
        sender=settings.mail_from,
    )


def build_account_service(
    settings: Settings,
    repository: AccountRepository,
    email_sender: EmailSender,
) -> AccountService:
    """
    Create the account service from settings and adapters.

    Called once during application startup; the service holds no
    per-request state.
    """
    return AccountService(
        repository=repository,
        email_sender=email_sender,
        token_issuer=TokenIssuer(
            secret=settings.jwt_secret,
            expires_in=settings.jwt_expires_in,
            algorithm=settings.jwt_algorithm,
        ),
        password_hasher=PasswordHasher(cost=settings.bcrypt_cost),
        otp_issuer=OtpIssuer(ttl=settings.otp_ttl),
        config=settings.auth_config(),
    )


def get_account_service(request: Request) -> AccountService:
    """
    Get the account service from app state.

    The service is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.account_service


# Bearer token security scheme for OpenAPI documentation
http_bearer = HTTPBearer(auto_error=False)


def get_current_account_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    service: AccountService = Depends(get_account_service),
) -> str:
    """
    Resolve the account id asserted by the bearer token.

    Missing, malformed, badly signed and expired tokens all get the same
    401 response.
    """
    account_id = None
    if credentials is not None:
        account_id = service.token_issuer.verify(credentials.credentials)

    if account_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized to access this route",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return account_id
