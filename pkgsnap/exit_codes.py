"""
Standard exit codes for pkgsnap commands.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional, Sequence

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors

# Application-specific exit codes (64-113 are typically available)
PERMISSION_ERROR = 67    # Insufficient permissions
DATA_ERROR = 70          # Data format or validation error
TOOL_UNAVAILABLE = 72    # git binary not found
GIT_ERROR = 73           # A git invocation failed
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'ToolUnavailableError': TOOL_UNAVAILABLE,
    'GitCommandError': GIT_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class ToolUnavailableError(CommandError):
    """Raised when the git binary cannot be found or run."""
    def __init__(self, message: str = "git is not installed or not on PATH"):
        super().__init__(message, TOOL_UNAVAILABLE)


class GitCommandError(CommandError):
    """Raised when a git invocation exits non-zero or cannot be started."""
    def __init__(
        self,
        command: Sequence[str],
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip() if stderr else ""
        message = f"'{' '.join(self.command)}' failed"
        if returncode is not None:
            message += f" with exit code {returncode}"
        if self.stderr:
            message += f": {self.stderr}"
        super().__init__(message, GIT_ERROR)
