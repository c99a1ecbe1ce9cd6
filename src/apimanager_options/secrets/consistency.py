"""Cross-field consistency checks for secret-backed options.

A database password is stored twice: on its own and embedded in the
database connection URL. Both copies must hold the same value.
"""

import re
from urllib.parse import unquote, urlsplit

from apimanager_options.exceptions import InconsistencyError, SecretParseError

# A percent sign not starting a two digit hex escape
_INVALID_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def validate_database_url_password_consistency(
    database_url: str,
    database_password: str,
    *,
    secret_name: str,
    url_field: str,
    password_field: str,
) -> None:
    """Check that a connection URL embeds the given password.

    A URL without user-info and a URL whose user-info has no password are
    reported the same way.

    Args:
        database_url: The connection URL.
        database_password: The separately stored password.
        secret_name: Secret both values come from, for error reporting.
        url_field: Field holding the URL, for error reporting.
        password_field: Field holding the password, for error reporting.

    Raises:
        SecretParseError: If the URL cannot be parsed or has no password part.
        InconsistencyError: If the embedded password differs.

    """
    try:
        parsed = urlsplit(database_url)
        # Accessing port validates it
        parsed.port  # noqa: B018
    except ValueError as err:
        raise SecretParseError(f"error parsing provided '{url_field}' field in '{secret_name}' secret: {err}") from err

    userinfo, _, _ = parsed.netloc.rpartition("@")
    if _INVALID_ESCAPE.search(userinfo):
        raise SecretParseError(
            f"error parsing provided '{url_field}' field in '{secret_name}' secret: invalid URL escape in user-info"
        )

    if parsed.password is None:
        raise SecretParseError(f"'{url_field}' field in '{secret_name}' secret doesn't have required password part")

    if unquote(parsed.password) != database_password:
        raise InconsistencyError(
            f"'{password_field}' field in secret '{secret_name}' does not match password part "
            f"in field '{url_field}'. Inconsistency detected"
        )
