"""Image options resolution."""

from apimanager_options import product
from apimanager_options.component.images import AmpImagesOptions
from apimanager_options.exceptions import OptionsError
from apimanager_options.models import APIManager


class AmpImagesOptionsProvider:
    """Resolves the image of every container, preferring APIManager overrides."""

    def __init__(self, apimanager: APIManager) -> None:
        self.apimanager = apimanager

    def get_amp_images_options(self) -> AmpImagesOptions:
        """Resolve image options.

        Returns:
            Validated image options.

        Raises:
            OptionsValidationError: If an image reference ends up empty.

        """
        spec = self.apimanager.spec
        options = AmpImagesOptions(
            apicast_image=product.APICAST_IMAGE if spec.apicast.image is None else spec.apicast.image,
            zync_image=product.ZYNC_IMAGE if spec.zync.image is None else spec.zync.image,
            zync_database_postgresql_image=(
                product.ZYNC_DATABASE_POSTGRESQL_IMAGE
                if spec.zync.postgresql_image is None
                else spec.zync.postgresql_image
            ),
        )
        try:
            options.validate()
        except OptionsError as err:
            raise err.with_context("get_amp_images_options validating") from err
        return options
