"""Default value generators.

These are used only when no authoritative value exists yet. Credential
generators return a fresh random value on every call; everything else is
deterministic in its arguments.
"""

import secrets
import string
from urllib.parse import quote

from kubernetes import client

_ALPHANUMERIC = string.ascii_letters + string.digits

ZYNC_DATABASE_USER = "zync"
ZYNC_DATABASE_HOST = "zync-database"
ZYNC_DATABASE_PORT = 5432
ZYNC_DATABASE_NAME = "zync_production"

DEFAULT_IMAGE_PULL_SECRET = "threescale-registry-auth"


def random_string(length: int) -> str:
    """Return a cryptographically random alphanumeric string.

    Args:
        length: Number of characters to generate.

    Returns:
        The random string.

    Raises:
        ValueError: If length is not positive.

    """
    if length <= 0:
        raise ValueError(f"Random string length must be positive, got {length}")
    return "".join(secrets.choice(_ALPHANUMERIC) for _ in range(length))


def default_zync_database_password() -> str:
    """Generate the password of the internal zync database."""
    return random_string(16)


def default_zync_secret_key_base() -> str:
    """Generate the Rails secret key base of zync."""
    return random_string(64)


def default_zync_authentication_token() -> str:
    """Generate the token the system component uses to authenticate to zync."""
    return random_string(16)


def default_zync_database_url(password: str) -> str:
    """Build the connection URL of the internal zync database.

    Args:
        password: The already resolved database password. It is embedded
            percent-encoded, so it survives any character set.

    Returns:
        A postgresql:// connection URL.

    """
    return (
        f"postgresql://{ZYNC_DATABASE_USER}:{quote(password, safe='')}"
        f"@{ZYNC_DATABASE_HOST}:{ZYNC_DATABASE_PORT}/{ZYNC_DATABASE_NAME}"
    )


def _requirements(
    limits_cpu: str, limits_memory: str, requests_cpu: str, requests_memory: str
) -> client.V1ResourceRequirements:
    return client.V1ResourceRequirements(
        limits={"cpu": limits_cpu, "memory": limits_memory},
        requests={"cpu": requests_cpu, "memory": requests_memory},
    )


def default_zync_container_resource_requirements() -> client.V1ResourceRequirements:
    """Resources of the zync container when resource requirements are enabled."""
    return _requirements("1", "512Mi", "150m", "250M")


def default_zync_que_container_resource_requirements() -> client.V1ResourceRequirements:
    return _requirements("1", "512Mi", "250m", "250M")


def default_zync_database_container_resource_requirements() -> client.V1ResourceRequirements:
    return _requirements("250m", "2G", "50m", "250M")


def default_apicast_staging_container_resource_requirements() -> client.V1ResourceRequirements:
    return _requirements("100m", "128Mi", "50m", "64Mi")


def default_apicast_production_container_resource_requirements() -> client.V1ResourceRequirements:
    return _requirements("1", "128Mi", "500m", "64Mi")


def default_zync_que_service_account_image_pull_secrets() -> list[client.V1LocalObjectReference]:
    """Pull secrets of the zync-que service account when the APIManager sets none."""
    return [client.V1LocalObjectReference(name=DEFAULT_IMAGE_PULL_SECRET)]
