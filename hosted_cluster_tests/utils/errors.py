"""Exceptions raised by the quick start framework."""


class KubeClientError(Exception):
    """An API call to a cluster failed."""


class NotFoundError(KubeClientError):
    """The requested object doesn't exist."""


def is_not_found(exc: BaseException) -> bool:
    """Check if the error means the object doesn't exist."""
    return isinstance(exc, NotFoundError)


class PollTimeoutError(TimeoutError):
    """A condition didn't become true before the poll deadline."""


class QuickStartError(Exception):
    """Base class for failures of a quick start run."""


class MissingInputError(QuickStartError):
    def __init__(self, field: str, reason: str = "") -> None:
        self.field = field
        msg = reason or f"{field} is required"
        super().__init__(msg)


class ResolutionError(QuickStartError):
    """Default release image couldn't be looked up."""


class ClientInitError(QuickStartError):
    """Client for an API server couldn't be constructed."""


class CreateError(QuickStartError):
    def __init__(self, resource: str, reason: str) -> None:
        self.resource = resource
        super().__init__(f"couldn't create {resource}: {reason}")


class MalformedSecretError(QuickStartError):
    def __init__(self, secret: str, key: str) -> None:
        self.secret = secret
        self.key = key
        super().__init__(f"secret '{secret}' is missing '{key}' key")


class ReadinessTimeoutError(QuickStartError):
    def __init__(self, stage: str, reason: str) -> None:
        self.stage = stage
        super().__init__(f"{stage}: {reason}")


class CleanupError(QuickStartError):
    def __init__(self, workspace: str, reason: str) -> None:
        self.workspace = workspace
        super().__init__(f"failed to clean up namespace '{workspace}': {reason}")


class CleanupTimeoutError(CleanupError):
    pass
