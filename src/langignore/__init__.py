"""langignore — keep per-language configuration collections out of config sync."""

__version__ = "0.1.0"


class LangignoreError(Exception):
    """User-facing CLI error.

    Raised for invalid patterns, missing directories, unreadable
    configuration and other recoverable input errors. The message is
    printed to stderr and the process exits with code 1.
    """
