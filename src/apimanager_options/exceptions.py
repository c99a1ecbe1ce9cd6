"""Custom exceptions for apimanager-options.

This module defines the exception hierarchy used throughout the application
so callers can tell a value that was never configured apart from one that
was configured inconsistently.
"""

import copy


class OptionsError(Exception):
    """Base exception for all options resolution errors.

    All custom exceptions in this package inherit from this class,
    allowing callers to catch all resolution errors with a single
    except clause if desired.
    """

    def with_context(self, operation: str) -> "OptionsError":
        """Return a copy of this error with the operation name prefixed.

        The copy keeps the concrete type and any extra attributes, so
        wrapping never changes the error kind seen by the caller.

        Args:
            operation: Name of the pipeline stage the error passed through.

        Returns:
            A new exception of the same type.

        """
        wrapped = copy.copy(self)
        wrapped.args = (f"{operation}: {self}",)
        return wrapped


class SecretNotFoundError(OptionsError):
    """Raised when a required secret or secret field is absent.

    Attributes:
        secret_name: Name of the secret that was looked up.
        field_name: Name of the field within the secret.

    """

    def __init__(self, message: str, *, secret_name: str = "", field_name: str = "") -> None:
        super().__init__(message)
        self.secret_name = secret_name
        self.field_name = field_name


class SecretParseError(OptionsError):
    """Raised when a stored value is not in the expected format.

    This can occur when:
    - A connection URL cannot be parsed
    - A connection URL has no user-info part
    - A connection URL has user-info but no password
    """


class InconsistencyError(OptionsError):
    """Raised when two independently resolved values that must agree differ.

    Typically one copy of a credential was rotated without the other.
    """


class OptionsValidationError(OptionsError):
    """Raised when a resolved options record is missing required fields.

    Attributes:
        fields: Names of the fields that failed validation.

    """

    def __init__(self, message: str, *, fields: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.fields = fields


class SecretSourceError(OptionsError):
    """Raised when the secret store rejects a read or write."""


class ClusterConnectionError(OptionsError):
    """Raised when connection to the Kubernetes cluster fails.

    This can occur when:
    - The kubeconfig is invalid or missing
    - The cluster is unreachable
    - Authentication fails
    """


class SpecParsingError(OptionsError):
    """Raised when parsing an APIManager document fails.

    This can occur when:
    - The file does not exist
    - The file is not valid YAML
    - The YAML does not describe an APIManager resource
    """


class RuleFactoryError(RuntimeError):
    """Raised when a PrometheusRule factory builds invalid synthetic options.

    This is a programming error in the factory itself. It is intentionally
    not an OptionsError so that no resolution error handler swallows it.
    """
