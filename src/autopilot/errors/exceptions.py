"""Custom exception classes for the autopilot API and worker."""


class AutopilotError(Exception):
    """Base exception carrying the envelope code and HTTP status."""

    def __init__(self, code: str, message: str, status_code: int = 500):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AuthenticationError(AutopilotError):
    """Missing or unknown API key."""

    def __init__(self, message: str = "Invalid API key"):
        super().__init__("UNAUTHORIZED", message, status_code=401)


class AuthorizationError(AutopilotError):
    """Known but deactivated API key."""

    def __init__(self, message: str = "API key is deactivated"):
        super().__init__("FORBIDDEN", message, status_code=403)


class RateLimitedError(AutopilotError):
    """Per-key request ceiling reached for the current window."""

    def __init__(self, limit: int, window_seconds: int):
        super().__init__(
            "RATE_LIMITED",
            f"Rate limit exceeded ({limit} req/{window_seconds}s)",
            status_code=429,
        )


class NotFoundError(AutopilotError):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: str | None = None):
        message = f"{resource} '{resource_id}' not found" if resource_id else f"{resource} not found"
        super().__init__("NOT_FOUND", message, status_code=404)


class ValidationError(AutopilotError):
    """Malformed or semantically invalid input."""

    def __init__(self, message: str):
        super().__init__("VALIDATION_ERROR", message, status_code=422)


class UpstreamError(AutopilotError):
    """A supplier or marketplace API call failed."""

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__("UPSTREAM_ERROR", f"{service}: {message}", status_code=502)


class UnknownJobTypeError(AutopilotError):
    """A job carries a type with no registered worker; retrying cannot help."""

    def __init__(self, job_type: str):
        self.job_type = job_type
        super().__init__("UNKNOWN_JOB_TYPE", f"Unknown job type: {job_type}", status_code=500)
