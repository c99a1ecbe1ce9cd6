"""Options resolvers, one per subsystem."""

from apimanager_options.operator.apicast_provider import ApicastOptionsProvider
from apimanager_options.operator.images_provider import AmpImagesOptionsProvider
from apimanager_options.operator.zync_provider import ZyncOptionsProvider

__all__ = [
    "AmpImagesOptionsProvider",
    "ApicastOptionsProvider",
    "ZyncOptionsProvider",
]
