"""
Standard exit codes for ggl.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
CONFIG_ERROR = 66        # Configuration file error
NETWORK_ERROR = 68       # Remote fetch failed
REPOSITORY_ERROR = 72    # Configured path is not a git repository
REVISION_ERROR = 73      # <remote>/<branch> does not resolve
GIT_ERROR = 74           # Any other git failure while reading history
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)


def exit_with_code(code: int, message: Optional[str] = None):
    """
    Exit with a specific code and optional message.

    Args:
        code: Exit code
        message: Optional message to print to stderr
    """
    import sys
    if message:
        print(message, file=sys.stderr)
    sys.exit(code)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigError(CommandError):
    """Raised when the configuration file is missing or malformed."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class InputError(CommandError):
    """Raised when a command-line value cannot be parsed."""
    def __init__(self, message: str):
        super().__init__(message, USAGE_ERROR)


class GitError(CommandError):
    """Raised when a git operation fails."""
    def __init__(self, message: str, exit_code: int = GIT_ERROR):
        super().__init__(message, exit_code)


class RepositoryOpenError(GitError):
    """Raised when a configured path is not a git repository."""
    def __init__(self, message: str):
        super().__init__(message, REPOSITORY_ERROR)


class FetchError(GitError):
    """Raised when fetching from a remote fails."""
    def __init__(self, message: str):
        super().__init__(message, NETWORK_ERROR)


class RevisionResolutionError(GitError):
    """Raised when a revision such as origin/main does not exist."""
    def __init__(self, message: str):
        super().__init__(message, REVISION_ERROR)
