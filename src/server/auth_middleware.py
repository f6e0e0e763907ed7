"""ASGI middleware for Bearer token authentication."""

from __future__ import annotations

import hmac
import logging

from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from src.audit.logger import AuditLogger
from src.models import AuditEvent, AuditEventType, RiskLevel
from src.webhook.errors import AuthInvalidError, AuthMissingError, ClientError

logger = logging.getLogger(__name__)

# Paths that bypass authentication (exact match)
PUBLIC_PATHS = frozenset({"/health"})


class AuthMiddleware:
    """Rejects requests whose bearer token does not match the configured one.

    Missing and wrong tokens share one status code; only the body differs.
    """

    def __init__(
        self,
        app: ASGIApp,
        token: str,
        audit_logger: AuditLogger | None = None,
        open_paths: frozenset[str] = frozenset(),
    ) -> None:
        self.app = app
        self._token = token.encode()
        self.audit_logger = audit_logger
        self._open_paths = PUBLIC_PATHS | open_paths

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        if request.url.path in self._open_paths:
            await self.app(scope, receive, send)
            return

        try:
            self._check(request.headers.get("authorization", ""))
        except ClientError as exc:
            self._log_failure(request, exc)
            response = PlainTextResponse(exc.public_message, status_code=exc.status_code)
            await response(scope, receive, send)
            return

        self._audit(request, AuditEventType.AUTH_SUCCESS, "success", RiskLevel.INFO)
        await self.app(scope, receive, send)

    def _check(self, header: str) -> None:
        scheme, _, credentials = header.partition(" ")
        if scheme != "Bearer" or not credentials:
            raise AuthMissingError("missing_token")
        if not hmac.compare_digest(credentials.encode("latin-1"), self._token):
            raise AuthInvalidError("invalid_token")

    def _log_failure(self, request: Request, exc: ClientError) -> None:
        reason = str(exc)
        logger.warning("Auth failure on %s %s: %s", request.method, request.url.path, reason)
        self._audit(
            request, AuditEventType.AUTH_FAILURE, "failure", RiskLevel.HIGH, {"reason": reason},
        )

    def _audit(
        self,
        request: Request,
        event_type: AuditEventType,
        result: str,
        risk_level: RiskLevel,
        details: dict[str, object] | None = None,
    ) -> None:
        if not self.audit_logger:
            return
        try:
            self.audit_logger.log(AuditEvent(
                event_type=event_type,
                source_ip=request.client.host if request.client else None,
                action=f"{request.method} {request.url.path}",
                result=result,
                risk_level=risk_level,
                details=details,
            ))
        except OSError:
            logger.exception("Failed to write audit event %s", event_type.value)
