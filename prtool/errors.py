"""Exception types raised by the pull request retrieval pipeline."""


class PRToolError(Exception):
    """Base exception for all prtool errors."""


class ConfigurationError(PRToolError):
    """Raised when the effective configuration is missing or unusable."""


class ConfigurationRequired(ConfigurationError):
    """Raised when no configuration object was supplied at all."""

    def __init__(self, message: str = "configuration is required") -> None:
        super().__init__(message)


class CredentialRequired(ConfigurationError):
    """Raised when no GitHub token is available before any network call."""

    def __init__(self, message: str = "GitHub token is required (--github-token or PRTOOL_GITHUB_TOKEN)") -> None:
        super().__init__(message)


class ConfigFileError(ConfigurationError):
    """Raised when the persisted configuration file cannot be read or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read {path}: {reason}")


class NoScopeSpecified(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("exactly one of --org, --team, --user, or --repo must be specified")


class MultipleScopesSpecified(ConfigurationError):
    def __init__(self, scopes: list[str]) -> None:
        self.scopes = scopes
        super().__init__(
            f"only one of --org, --team, --user, or --repo can be specified (got: {', '.join(scopes)})"
        )


class InvalidScopeValue(ConfigurationError):
    """Raised when a scope value does not have the expected owner/name shape."""

    def __init__(self, kind: str, value: str, expected: str) -> None:
        self.kind = kind
        self.value = value
        super().__init__(f"invalid {kind} format: {value!r}. Expected {expected}")


class TimeWindowError(PRToolError):
    """Raised when a relative time window expression cannot be resolved."""


class EmptyInput(TimeWindowError):
    def __init__(self) -> None:
        self.expression = ""
        super().__init__("duration string cannot be empty")


class InvalidFormat(TimeWindowError):
    def __init__(self, expression: str, reason: str) -> None:
        self.expression = expression
        self.reason = reason
        super().__init__(f"invalid duration {expression!r}: {reason}")


class UpstreamError(PRToolError):
    """Raised when the GitHub API call behind an operation fails."""

    def __init__(self, message: str, context: str, status_code: int | None = None) -> None:
        self.context = context
        self.status_code = status_code
        super().__init__(message)


class AuthenticationFailed(UpstreamError):
    def __init__(self, context: str) -> None:
        super().__init__(f"GitHub authentication failed while {context}", context, status_code=401)


class UpstreamTransportError(UpstreamError):
    def __init__(self, context: str, detail: str, status_code: int | None = None) -> None:
        self.detail = detail
        status = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"GitHub request failed while {context}{status}: {detail}", context, status_code)


class RepositoryFetchFailed(UpstreamError):
    """Per-repository pull request fetch failure. Recovered by the collector."""

    def __init__(self, repository: str, cause: Exception) -> None:
        self.repository = repository
        self.cause = cause
        status_code = getattr(cause, "status_code", None)
        super().__init__(f"Failed to fetch pull requests for {repository}: {cause}", repository, status_code)


class NoRepositoriesFound(PRToolError):
    def __init__(self, kind: str, value: str) -> None:
        self.kind = kind
        self.value = value
        super().__init__(f"no repositories found for {kind} {value!r}")


class SummaryError(PRToolError):
    """Raised by a summarizer when the language model call fails."""
