"""Release identity of the managed API management platform."""

THREESCALE_RELEASE = "2.11"

# Default container images for this release
APICAST_IMAGE = f"registry.redhat.io/3scale-amp2/apicast-gateway-rhel8:3scale{THREESCALE_RELEASE}"
ZYNC_IMAGE = f"registry.redhat.io/3scale-amp2/zync-rhel8:3scale{THREESCALE_RELEASE}"
ZYNC_DATABASE_POSTGRESQL_IMAGE = "registry.redhat.io/rhscl/postgresql-10-rhel7:1"
