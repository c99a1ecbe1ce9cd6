"""Declarative secret field policies.

Each options field backed by a secret is described by one
SecretFieldPolicy row. Resolution is split into a pure decision
(decide_field_value) and a separate persistence step, so whether a
resolution would write to the secret store can be answered without
performing it.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from icecream import ic

from apimanager_options.exceptions import SecretNotFoundError
from apimanager_options.models import APIManager

if TYPE_CHECKING:
    from apimanager_options.secrets.source import SecretSource


def never(apimanager: APIManager) -> bool:  # noqa: ARG001
    return False


@dataclass(frozen=True, slots=True)
class SecretFieldPolicy:
    """How one options field is sourced from a secret.

    Attributes:
        option: Name of the options attribute receiving the value.
        secret_name: Secret holding the value.
        field_name: Field within the secret.
        default: Builds the fallback value from the values resolved so
            far, keyed by option name. Only called when a default is needed.
        required_if: When true for the APIManager, an absent value is an
            error instead of being defaulted.

    """

    option: str
    secret_name: str
    field_name: str
    default: Callable[[Mapping[str, str]], str]
    required_if: Callable[[APIManager], bool] = never

    def is_required(self, apimanager: APIManager) -> bool:
        return self.required_if(apimanager)


@dataclass(frozen=True, slots=True)
class FieldDecision:
    """Outcome of resolving one secret field.

    Attributes:
        value: The value to use.
        persist: Whether the value is a new default that must be stored.

    """

    value: str
    persist: bool


def decide_field_value(
    existing: str | None,
    *,
    secret_name: str,
    field_name: str,
    required: bool,
    default: Callable[[], str],
) -> FieldDecision:
    """Decide the value of a secret field without side effects.

    Args:
        existing: The stored value, or None when the secret or field is absent.
        secret_name: Secret name, for error reporting.
        field_name: Field name, for error reporting.
        required: Whether an absent value is an error.
        default: Produces the fallback value.

    Returns:
        The decision.

    Raises:
        SecretNotFoundError: If the value is required and absent.

    """
    if existing is not None:
        return FieldDecision(value=existing, persist=False)
    if required:
        raise SecretNotFoundError(
            f"Required field '{field_name}' of secret '{secret_name}' not found",
            secret_name=secret_name,
            field_name=field_name,
        )
    return FieldDecision(value=default(), persist=True)


def resolve_secret_fields(
    policies: Iterable[SecretFieldPolicy],
    apimanager: APIManager,
    source: "SecretSource",
) -> dict[str, str]:
    """Resolve every policy row in order.

    Args:
        policies: The policy table. Later rows may use earlier values in
            their default.
        apimanager: The APIManager the required_if predicates read.
        source: The secret store.

    Returns:
        Resolved values keyed by option name.

    Raises:
        SecretNotFoundError: If a required field is absent.

    """
    resolved: dict[str, str] = {}
    for policy in policies:
        existing = source.lookup(policy.secret_name, policy.field_name)
        decision = decide_field_value(
            existing,
            secret_name=policy.secret_name,
            field_name=policy.field_name,
            required=policy.is_required(apimanager),
            default=lambda policy=policy: policy.default(resolved),
        )
        ic(policy.option, decision.persist)
        if decision.persist:
            source.persist(policy.secret_name, policy.field_name, decision.value)
        resolved[policy.option] = decision.value
    return resolved
