"""Exception hierarchy for meshctl.

Handlers raise these; the CLI entry point turns them into a red error line
and a non-zero exit code.
"""


class MesheryCtlError(Exception):
    """Base class for every error meshctl reports to the user."""


class ConfigError(MesheryCtlError):
    """The context file is missing, malformed, or points at nothing."""


class ServerUnreachableError(MesheryCtlError):
    """The Meshery server did not answer at the configured endpoint."""


class VersionMismatchError(MesheryCtlError):
    """The context version is not compatible with the running server."""


class InvalidArgumentError(MesheryCtlError):
    """A subcommand or one of its arguments is missing or invalid."""


class APIError(MesheryCtlError):
    """A request failed in transport, returned an error status, or could not be decoded."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class OutputFormatError(MesheryCtlError):
    """Output could not be rendered in the requested format."""


class SelectionError(MesheryCtlError):
    """No valid choice was made at an interactive prompt."""


class SelectionCancelledError(SelectionError):
    """The user backed out of an interactive prompt."""
