"""
Errors that abort a CBOM generation run.
"""


class CbomError(Exception):
    """Base class for fatal CBOM generation errors."""


class ConfigurationError(CbomError):
    """Required scanner configuration is missing or invalid."""


class BuildRequiredError(CbomError):
    """The project must be built before it can be scanned."""
