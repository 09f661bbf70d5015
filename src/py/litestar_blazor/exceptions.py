"""Litestar-Blazor exception classes."""

__all__ = [
    "ConfigMalformedError",
    "ConfigNotFoundError",
    "DefaultPageNotFoundError",
    "LitestarBlazorError",
    "RebuildProcessError",
]


class LitestarBlazorError(Exception):
    """Base exception for Litestar-Blazor related errors."""


class ConfigNotFoundError(LitestarBlazorError):
    """Raised when the build descriptor next to the client assembly cannot be loaded."""

    def __init__(self, descriptor_path: str, message: "str | None" = None) -> None:
        """Initialize the exception.

        Args:
            descriptor_path: Location where the descriptor was expected.
            message: Optional override for the default message.
        """
        self.descriptor_path = descriptor_path
        super().__init__(
            message
            or f"Build descriptor not found at {descriptor_path!r}. Did you forget to build the client application?"
        )


class ConfigMalformedError(ConfigNotFoundError):
    """Raised when the build descriptor exists but cannot be parsed."""

    def __init__(self, descriptor_path: str, reason: str) -> None:
        self.reason = reason
        super().__init__(descriptor_path, f"Build descriptor at {descriptor_path!r} is malformed: {reason}")


class DefaultPageNotFoundError(LitestarBlazorError):
    """Raised when the SPA fallback cannot find the default page in the distribution directory."""

    def __init__(self, default_page: str, root: str) -> None:
        super().__init__(
            f"The SPA fallback could not serve the default page {default_page!r} from {root!r}. "
            "Make sure the client application has been built."
        )


class RebuildProcessError(LitestarBlazorError):
    """Raised when the auto-rebuild process fails to start or stop."""

    def __init__(
        self,
        message: str,
        command: "list[str] | None" = None,
        exit_code: "int | None" = None,
        stderr: "str | None" = None,
        stdout: "str | None" = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        self.stdout = stdout
