"""Secret handling subpackage.

This package contains the secret store interface, the declarative field
policies and the cross-field consistency checks.
"""

from apimanager_options.secrets.consistency import validate_database_url_password_consistency
from apimanager_options.secrets.policy import (
    FieldDecision,
    SecretFieldPolicy,
    decide_field_value,
    resolve_secret_fields,
)
from apimanager_options.secrets.source import KubernetesSecretSource, SecretSource

__all__ = [
    # source
    "SecretSource",
    "KubernetesSecretSource",
    # policy
    "SecretFieldPolicy",
    "FieldDecision",
    "decide_field_value",
    "resolve_secret_fields",
    # consistency
    "validate_database_url_password_consistency",
]
