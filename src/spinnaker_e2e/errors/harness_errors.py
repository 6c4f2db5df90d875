"""
Harness error hierarchy with categorization and user guidance.

This module defines the error types carried by failed results throughout the
end-to-end harness. Errors are not raised across public operations; they are
returned inside a ``Result`` and only raised when a caller unwraps it.
"""


class HarnessError(Exception):
    """
    Base error class for all harness-related failures.

    Provides categorization and user guidance for resolution.
    """

    def __init__(
        self,
        message: str,
        category: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize harness error.

        Args:
            message: Human-readable error description
            category: Error category (configuration, gateway, verification, setup)
            user_action: What user should do to resolve the issue
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.category = category
        self.user_action = user_action
        self.cause = cause

    def __str__(self) -> str:
        """Enhanced string representation with user guidance."""
        base_msg = super().__str__()
        if self.user_action:
            return f"{base_msg}\nAction required: {self.user_action}"
        return base_msg


class ConfigurationError(HarnessError):
    """Error resolving the harness configuration."""

    def __init__(
        self,
        message: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category="configuration",
            user_action=user_action or "Set the corresponding environment variable",
            cause=cause,
        )


class GatewayError(HarnessError):
    """Error reported by the command/manifest gateway."""

    def __init__(
        self,
        operation: str,
        message: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        self.operation = operation
        super().__init__(
            message=f"{operation} failed: {message}",
            category="gateway",
            user_action=user_action or "Check cluster connectivity and kubeconfig",
            cause=cause,
        )


class CommandError(GatewayError):
    """A cluster command exited unsuccessfully."""

    def __init__(
        self,
        command: str,
        returncode: int | None,
        output: str = "",
        cause: Exception | None = None,
    ):
        self.command = command
        self.returncode = returncode
        self.output = output
        detail = f"exit code {returncode}" if returncode is not None else "not run"
        if output:
            detail = f"{detail}: {output.strip()[:500]}"
        super().__init__(operation=command, message=detail, cause=cause)


class HttpError(GatewayError):
    """An HTTP GET against a deployed instance failed."""

    def __init__(
        self,
        url: str,
        message: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        self.url = url
        self.status_code = status_code
        if status_code:
            message = f"HTTP {status_code}: {message}"
        super().__init__(
            operation=f"GET {url}",
            message=message,
            user_action="Check that the instance is deployed and its API is reachable",
            cause=cause,
        )


class SetupError(HarnessError):
    """Error provisioning a shared or per-test environment."""

    def __init__(
        self,
        message: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category="setup",
            user_action=user_action
            or "Inspect the harness logs for the step that failed",
            cause=cause,
        )


class VerificationError(HarnessError):
    """Observed cluster state does not match the expected state."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message=message, category="verification", cause=cause)


class SpinFilesError(HarnessError):
    """Error generating an inline Spinnaker config file overlay."""

    def __init__(self, path: str, message: str, cause: Exception | None = None):
        self.path = path
        super().__init__(
            message=f"{path}: {message}",
            category="io",
            user_action="Check that the source file exists and the overlay is writable",
            cause=cause,
        )
