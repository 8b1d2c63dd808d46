"""Export error taxonomy."""


class ExportError(Exception):
    """Base class for every failure surfaced by the export pipeline."""

    pass


class ValidationError(ExportError):
    """Request input is unusable. Never retried."""

    pass


class DisallowedUrlError(ValidationError):
    """A URL failed the scheme/host allow-list."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"URL not allowed: {reason}")
        self.reason = reason


class NotFoundError(ValidationError):
    """No resume projection exists for the supplied identifier."""

    pass


class UserNotFoundError(NotFoundError):
    """The user does not exist."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class ResumeNotFoundError(NotFoundError):
    """The user exists but has no resume to export."""

    def __init__(self, user_id: str, resume_id: str | None = None) -> None:
        target = f"resume {resume_id}" if resume_id else "resume"
        super().__init__(f"No {target} found for user {user_id}")
        self.user_id = user_id
        self.resume_id = resume_id


class RenderError(ExportError):
    """The browser engine failed to produce an artifact."""

    pass


class NavigationError(RenderError):
    """Navigation to the render target failed."""

    pass


class ElementNotFoundError(RenderError):
    """An expected element was missing after its readiness wait."""

    def __init__(self, selector: str) -> None:
        super().__init__(f"Element not found: {selector}")
        self.selector = selector


class RenderTimeoutError(ExportError):
    """An engine operation exceeded its deadline. Fatal to the request only."""

    def __init__(self, operation: str, budget: float) -> None:
        super().__init__(f"Timed out after {budget:.2f}s during {operation}")
        self.operation = operation
        self.budget = budget


class SessionCrashError(ExportError):
    """The shared browser became unreachable; it is relaunched on next acquire."""

    pass


class Backpressure(ExportError):
    """The render queue is full; the caller should retry later."""

    def __init__(self, retry_after: float = 1.0) -> None:
        super().__init__("Render capacity exhausted, retry later")
        self.retry_after = retry_after


class ProjectionUnavailableError(ExportError):
    """The persistence service could not supply a projection."""

    pass
