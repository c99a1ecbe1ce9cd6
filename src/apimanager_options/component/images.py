"""Container image options."""

from dataclasses import dataclass

from apimanager_options.component.options import validate_required


@dataclass
class AmpImagesOptions:
    """Image references for every managed container."""

    apicast_image: str = ""
    zync_image: str = ""
    zync_database_postgresql_image: str = ""

    def validate(self) -> None:
        validate_required(self, non_empty=("apicast_image", "zync_image", "zync_database_postgresql_image"))
