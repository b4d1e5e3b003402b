"""
YAML loading for feature parameters.

Hosts that keep feature parameters in a file can load them with
:func:`load_feature_parameters`. Parameters may sit at the top level of the
document or under a ``durationguard`` section::

    durationguard:
      testNamesPatterns: 'com\\.acme\\..*'
      minDuration: 1000
      threshold: 80
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml
from pydantic import ValidationError

from durationguard import logger
from durationguard.config.models import FeatureParameters
from durationguard.exceptions import ConfigError, log_and_raise

SECTION_KEY = "durationguard"


def _select_section(document: Mapping[str, Any]) -> Mapping[str, Any]:
    section = document.get(SECTION_KEY, document)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigError(
            f"'{SECTION_KEY}' section must be a mapping, got {type(section).__name__}",
            error_code="CONFIG_003",
        )
    return section


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    if not config_path.is_file():
        raise ConfigError(
            f"Parameter file not found: {config_path}",
            error_code="CONFIG_001",
            context={"config_path": config_path},
        )

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            document = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Error parsing YAML parameters: {e}",
            error_code="CONFIG_002",
            context={"config_path": config_path},
        ) from e

    if not isinstance(document, dict):
        raise ConfigError(
            f"Parameter file must contain a mapping, got {type(document).__name__}",
            error_code="CONFIG_003",
            context={"config_path": config_path},
        )
    return document


def load_feature_parameters(
    source: Union[str, Path, Mapping[str, Any]]
) -> FeatureParameters:
    """
    Load feature parameters from a YAML file or a mapping.

    Args:
        source: Path to a YAML file, or an already-parsed mapping

    Returns:
        Validated :class:`FeatureParameters`; omitted keys take the defaults

    Raises:
        ConfigError: If the file is missing (CONFIG_001), is not valid YAML
            (CONFIG_002), has the wrong shape (CONFIG_003) or the source type
            is unsupported (CONFIG_004)
    """
    if isinstance(source, Mapping):
        logger.debug("Loading feature parameters from mapping")
        document = source
    elif isinstance(source, (str, Path)):
        config_path = Path(source)
        logger.debug(f"Loading feature parameters from {config_path}")
        document = _read_yaml(config_path)
    else:
        raise ConfigError(
            f"Invalid parameter source type: {type(source).__name__}. Expected a path or a mapping.",
            error_code="CONFIG_004",
        )

    section = _select_section(document)

    try:
        parameters = FeatureParameters.model_validate(dict(section))
    except ValidationError as e:
        error_details = []
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error['loc'])
            error_details.append(f"Field '{field_path}': {error['msg']}")

        detailed_error = "Feature parameter validation failed:\n" + "\n".join(error_details)
        error = ConfigError(
            detailed_error,
            error_code="CONFIG_003",
            context={"validation_errors": error_details},
        )
        error.__cause__ = e
        log_and_raise(error, logger)

    logger.info(f"Feature parameters loaded: {parameters.as_raw_parameters()}")
    return parameters


__all__ = ["SECTION_KEY", "load_feature_parameters"]
