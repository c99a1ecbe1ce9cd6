"""Label helpers shared by the options resolvers."""

from collections.abc import Mapping

# Application type reported in metering labels
APPLICATION_TYPE = "application"


def parse_version(image: str) -> str:
    """Extract the version tag from an image reference.

    Args:
        image: Image reference such as 'quay.io/3scale/zync:2.11'.

    Returns:
        The tag part of the reference, or 'latest' when it carries no tag.

    """
    name = image.split("@", 1)[0]
    last_segment = name.rsplit("/", 1)[-1]
    if ":" not in last_segment:
        return "latest"
    return last_segment.rsplit(":", 1)[1] or "latest"


def metering_labels(component_name: str, component_version: str, application_type: str = APPLICATION_TYPE) -> dict[str, str]:
    """Build the product metering labels for a pod template.

    Args:
        component_name: The sub-component the pod belongs to.
        component_version: Version parsed from the component image.
        application_type: Metering application type.

    Returns:
        A new dictionary of metering labels.

    """
    return {
        "com.company": "Red_Hat",
        "rht.prod_name": "Red_Hat_Integration",
        "rht.prod_ver": "master",
        "rht.comp": "3scale",
        "rht.comp_ver": component_version,
        "rht.subcomp": component_name,
        "rht.subcomp_t": application_type,
    }


def merge_labels(*layers: Mapping[str, str]) -> dict[str, str]:
    """Merge label layers into a new dictionary.

    Later layers overwrite keys set by earlier ones.

    Args:
        *layers: Label mappings in increasing order of precedence.

    Returns:
        The merged labels.

    """
    merged: dict[str, str] = {}
    for layer in layers:
        merged.update(layer)
    return merged


def pod_template_labels(component_name: str, image: str, common: Mapping[str, str]) -> dict[str, str]:
    """Compose the labels of a pod template.

    Layers are metering labels, then the common group labels, then the
    'deploymentConfig' tier identifier.

    Args:
        component_name: Tier identifier, also used as metering sub-component.
        image: Image the pod runs, used to derive the metering version.
        common: Common labels of the group the pod belongs to.

    Returns:
        The pod template labels.

    """
    return merge_labels(
        metering_labels(component_name, parse_version(image)),
        common,
        {"deploymentConfig": component_name},
    )
