"""
Validation and error handling for the alchemybuild package.

This module provides input validation and error handling with consistent
error reporting across the application.
"""

from .exceptions import (
    BuildStepError,
    ConfigurationError,
    ErrorSeverity,
    PackageListNotFoundError,
    UnsupportedDistributionError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
)

from .validators import (
    validate_boolean,
    validate_non_empty_string,
    validate_positive_integer,
    validate_string_list,
)

__all__ = [
    # Exceptions
    "BuildStepError",
    "ConfigurationError",
    "ErrorSeverity",
    "PackageListNotFoundError",
    "UnsupportedDistributionError",
    "ValidationError",
    # Handlers
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    # Validators
    "validate_boolean",
    "validate_non_empty_string",
    "validate_positive_integer",
    "validate_string_list",
]
