"""Exceptions raised by the style pre-commit hook."""


class HookError(Exception):
    """Base class for errors that stop the hook with a nonzero exit status."""


class ConfigurationError(HookError):
    """The hook is misconfigured or a required external tool is missing.

    Raised before any file has been touched.
    """


class ToolError(HookError):
    """An external tool could not be run to completion (e.g. it timed out)."""
