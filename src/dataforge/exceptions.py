"""Exception hierarchy for dataforge.

Every error raised by the registry, the extension manager and the built-in
generators derives from :class:`DataforgeError`. Errors accept an optional
context dictionary describing what was being looked up or built, which makes
failures from plugin code much easier to trace.

Example:
    ```python
    from dataforge.exceptions import DataforgeError, NotFoundError

    try:
        factory.create_generator("phone")
    except NotFoundError as e:
        logger.warning(f"Unknown generator: {e.context['name']}")
    except DataforgeError as e:
        logger.error(f"Generation failed: {e}")
    ```
"""

from typing import Any, Dict


class DataforgeError(Exception):
    """Base exception for all dataforge errors.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context (names, types, etc.)
        details: Alternative to context (both are supported)

    Example:
        ```python
        error = DataforgeError(
            "Registration failed",
            context={"name": "custom_value", "extension": "example-extension"}
        )
        str(error)
        # 'Registration failed'
        ```
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        """Initialize the exception with optional context.

        Args:
            message: Error message
            context: Optional context dictionary
            details: Optional details dictionary (takes precedence over context)
        """
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class NotFoundError(DataforgeError, LookupError):
    """Raised when a generator or extension name is not registered.

    Example:
        ```python
        raise NotFoundError(
            "Generator not found: phone",
            context={"name": "phone", "available": ["uuid", "lei"]}
        )
        ```
    """

    pass


class OperationError(DataforgeError):
    """Raised when a registry operation fails."""

    pass


class DuplicateRegistrationError(OperationError):
    """Raised when a name is registered twice without ``override=True``.

    The factory never replaces a live registration implicitly. Callers that
    want last-writer-wins must ask for it explicitly.
    """

    pass


class InstantiationError(OperationError):
    """Raised when a registered generator cannot be constructed.

    The original exception is chained as ``__cause__``. The registry is left
    unchanged, so a later attempt can succeed once the cause is fixed.
    """

    pass


class ValidationError(DataforgeError):
    """Raised when input data fails validation."""

    pass


class ParameterTypeError(ValidationError, TypeError):
    """Raised by a generator when a context parameter has the wrong type.

    Parameters are not validated centrally. Each generator coerces the
    parameters it reads and raises this error for the current call only.

    Example:
        ```python
        raise ParameterTypeError(
            "Parameter 'length' expects int, got str",
            context={"parameter": "length", "value": "abc", "expected": "int"}
        )
        ```
    """

    pass


class ConfigurationError(DataforgeError):
    """Raised when settings are invalid or cannot be loaded."""

    pass


class DiscoveryError(DataforgeError):
    """Raised when an extension source cannot be loaded.

    Discovery providers record these per extension instead of letting them
    abort the whole discovery pass.
    """

    pass


__all__ = [
    "DataforgeError",
    "NotFoundError",
    "OperationError",
    "DuplicateRegistrationError",
    "InstantiationError",
    "ValidationError",
    "ParameterTypeError",
    "ConfigurationError",
    "DiscoveryError",
]
