"""Relay error taxonomy.

Every error knows the HTTP status it maps to and the short plain-text body a
caller is allowed to see. Provider and platform details stay on the exception
for logging only.
"""

from __future__ import annotations


class RelayError(Exception):
    status_code = 500
    public_message = "Internal Server Error"


class TransportError(RelayError):
    """Connect, timeout, TLS or protocol failure on an outbound call."""


# --- Client errors: terminal, raised before any outbound call ---


class ClientError(RelayError):
    status_code = 400


class AuthMissingError(ClientError):
    status_code = 401
    public_message = "No Bearer Header"


class AuthInvalidError(ClientError):
    status_code = 401
    public_message = "Authentication Error"


class MalformedBodyError(ClientError):
    public_message = "Malformed request body"


class EmptyPromptError(ClientError):
    public_message = "Prompt cannot be empty"


class NoMessageTextError(ClientError):
    public_message = "No Message Text"


class MissingChatError(ClientError):
    public_message = "No Chat Id"


# --- Completion provider failures ---


class CompletionError(RelayError):
    public_message = "Error calling chat API"


class CompletionTransportError(CompletionError, TransportError):
    pass


class BadResponseFormatError(CompletionError):
    """Provider answered with a body that is not JSON."""

    def __init__(self, status_code: int, body: str) -> None:
        self.provider_status = status_code
        self.body = body
        super().__init__(f"Provider returned non-JSON body (status {status_code})")


class MissingContentError(CompletionError):
    """choices[0].message.content is absent or not a string."""

    def __init__(self, status_code: int, body: str) -> None:
        self.provider_status = status_code
        self.body = body
        super().__init__(f"Missing content in the response (status {status_code}): {body}")


# --- Messaging platform failures ---


class DeliveryError(RelayError):
    public_message = "Error sending Telegram message"


class DeliveryTransportError(DeliveryError, TransportError):
    pass


class PlatformApiError(DeliveryError):
    """sendMessage answered with a non-2xx status."""

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"Telegram API error {status}: {body}")
