"""APIManager document parsing.

This module provides the loader that turns a YAML file into an
APIManager model.
"""

from typing import Any

import yaml
from icecream import ic

from apimanager_options.exceptions import SpecParsingError
from apimanager_options.models import APIManager

_KIND = "APIManager"


def parse_resource_file(path: str) -> dict[str, Any]:
    """Parse a single-document YAML resource file.

    Args:
        path: Path to the resource file.

    Returns:
        The parsed YAML document as a dictionary.

    Raises:
        SpecParsingError: If the file does not exist, is empty, contains
            multiple documents, contains malformed YAML, or is not a YAML mapping.

    """
    try:
        with open(path) as stream:
            docs = [doc for doc in yaml.safe_load_all(stream) if doc is not None]
    except FileNotFoundError as err:
        raise SpecParsingError(f"Resource file '{path}' does not exist") from err
    except yaml.YAMLError as err:
        raise SpecParsingError(f"Resource file '{path}' contains malformed YAML: {err}") from err

    if len(docs) > 1:
        raise SpecParsingError(
            f"File '{path}' contains multiple YAML documents. Only single document files are supported."
        )
    if not docs:
        raise SpecParsingError(f"Resource file '{path}' is empty")
    result = docs[0]
    if not isinstance(result, dict):
        raise SpecParsingError(
            f"File '{path}' does not contain a valid YAML mapping. Expected a Kubernetes resource document."
        )
    return result


def load_apimanager(path: str) -> APIManager:
    """Load an APIManager resource from a YAML file.

    Args:
        path: Path to the resource file.

    Returns:
        The APIManager with defaults applied.

    Raises:
        SpecParsingError: If the file cannot be parsed or is not an APIManager.

    """
    document = parse_resource_file(path)
    kind = document.get("kind")
    if kind != _KIND:
        raise SpecParsingError(f"File '{path}' describes a '{kind}' resource, expected '{_KIND}'")
    apimanager = APIManager.from_dict(document)
    ic(apimanager)
    return apimanager
