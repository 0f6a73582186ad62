"""Custom exception hierarchy for Thinkarr."""

from typing import Any


class ThinkarrError(Exception):
    """Base exception for all Thinkarr errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ----- Authentication Errors -----


class AuthenticationError(ThinkarrError):
    """Authentication failed."""

    pass


class UnauthorizedError(ThinkarrError):
    """Caller is not allowed to perform this action."""

    pass


# ----- Resource Errors -----


class NotFoundError(ThinkarrError):
    """Requested resource was not found."""

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(
            message=f"{resource} not found",
            details={"resource": resource, "identifier": identifier},
        )


class ConflictError(ThinkarrError):
    """Resource conflict (e.g., duplicate)."""

    pass


class ToolConflictError(ConflictError):
    """A tool with the same name is already registered."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(
            message=f"Tool already registered: {tool_name}",
            details={"tool": tool_name},
        )


# ----- Validation Errors -----


class ValidationError(ThinkarrError):
    """Input validation failed."""

    pass


# ----- Configuration Errors -----


class ConfigurationError(ThinkarrError):
    """Required configuration is missing or invalid."""

    pass


class LlmNotConfiguredError(ConfigurationError):
    """No usable LLM endpoint is configured."""

    def __init__(self, message: str = "LLM not configured. Complete setup first.") -> None:
        super().__init__(message)


class ServiceNotConfiguredError(ConfigurationError):
    """A media service needed by a tool has no URL or credential."""

    def __init__(self, service: str) -> None:
        super().__init__(
            message=f"{service} not configured",
            details={"service": service},
        )


# ----- External Service Errors -----


class ExternalServiceError(ThinkarrError):
    """Error from an external service."""

    pass


class LLMServiceError(ExternalServiceError):
    """Error from the LLM provider."""

    pass
