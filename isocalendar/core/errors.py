class IsocalendarError(Exception):
    """Fatal failure of an isocalendar computation.

    `kind` classifies the failure for callers, `cause` keeps the original
    exception (also chained as `__cause__` where raised with `from`).
    """

    kind = "internal"

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class InvalidGitHubTokenError(IsocalendarError):
    """Raised when GitHub rejects the provided token."""

    kind = "github-auth"


class GitHubAPIError(IsocalendarError):
    """Raised when GitHub requests fail for non-auth reasons."""

    kind = "github-api"
