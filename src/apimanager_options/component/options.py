"""Structural validation shared by the options models."""

from typing import Any

from apimanager_options.exceptions import OptionsValidationError


def validate_required(
    options: Any,
    *,
    non_empty: tuple[str, ...] = (),
    present: tuple[str, ...] = (),
) -> None:
    """Check that the required fields of an options record are set.

    Args:
        options: The options record.
        non_empty: Attributes that must hold a non-empty string.
        present: Attributes that must not be None. An empty mapping or
            list counts as present.

    Raises:
        OptionsValidationError: Listing every field that failed.

    """
    missing = [name for name in non_empty if not getattr(options, name)]
    missing += [name for name in present if getattr(options, name) is None]
    if missing:
        raise OptionsValidationError(
            f"{type(options).__name__} is missing required fields: {', '.join(missing)}",
            fields=tuple(missing),
        )
