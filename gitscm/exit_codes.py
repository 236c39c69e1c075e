"""
Standard exit codes and error types for gitscm commands.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional, Sequence

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
NO_CHANGES = 64          # Poll found nothing new (only with --exit-code)
GIT_ERROR = 65           # A git operation failed (clone, fetch, checkout, ...)
CONFIG_ERROR = 66        # Configuration file error
INTEGRATION_FAILED = 67  # Branch does not merge cleanly onto the merge target
PERMISSION_ERROR = 68    # Insufficient permissions
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ConfigError': CONFIG_ERROR,
    'GitCommandError': GIT_ERROR,
    'MergeError': INTEGRATION_FAILED,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code

    def to_dict(self):
        return {'error': str(self), 'type': self.__class__.__name__}


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class GitCommandError(CommandError):
    """
    A primitive git operation failed.

    Carries enough context (command, workspace, remote, branch, revisions)
    to diagnose the failure from the build or poll log.
    """
    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
        workspace: Optional[str] = None,
        **context
    ):
        super().__init__(message, GIT_ERROR)
        self.command = list(command) if command else []
        self.returncode = returncode
        self.stderr = stderr or ''
        self.workspace = workspace
        self.context = context

    def __str__(self):
        text = self.args[0]
        details = [f"{k}={v}" for k, v in self.context.items() if v is not None]
        if self.workspace:
            details.insert(0, f"workspace={self.workspace}")
        if details:
            text += f" ({', '.join(details)})"
        if self.stderr:
            text += f": {self.stderr.strip()}"
        return text

    def to_dict(self):
        result = super().to_dict()
        result['command'] = self.command
        result['returncode'] = self.returncode
        if self.workspace:
            result['workspace'] = self.workspace
        result.update({k: v for k, v in self.context.items() if v is not None})
        return result


class MergeError(GitCommandError):
    """Raised by the git client when a merge does not complete cleanly."""
    def __init__(self, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.exit_code = INTEGRATION_FAILED

