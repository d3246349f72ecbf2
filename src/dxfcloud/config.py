import json
import logging
from pathlib import Path

from .models import ExtractionConfig, LayerNamePolicy

log = logging.getLogger(__name__)

KNOWN_ENTITY_TYPES = ("TEXT", "POINT")


class ConfigurationHandler:
    """Loads the point extraction settings from a JSON file.

    The file names the layer to extract points from, the entity types to
    decode, the layer name sanitization and whether parsing is strict.
    """

    def __init__(self, config_path: Path) -> None:
        """Initialize configuration handler with the JSON file path.

        Parameters
        ----------
        config_path : Path
            Path to JSON configuration file
        """
        self.config_path = config_path
        self.config = ExtractionConfig.default()

    def _create_entity_types(self, values: list[str] | str | None) -> tuple[str, ...]:
        """Create the upper-cased entity types, falling back to the default types."""
        if values is None:
            return ExtractionConfig.default().entity_types
        if isinstance(values, str):
            values = [values]
        entity_types = []
        for value in values:
            entity_type = str(value).strip().upper()
            if len(entity_type) == 0:
                continue
            if entity_type not in KNOWN_ENTITY_TYPES:
                log.debug(f"Entity type '{entity_type}' has no point decoder")
            entity_types.append(entity_type)
        if len(entity_types) == 0:
            log.warning("No entity types configured, defaulting to TEXT and POINT")
            return ExtractionConfig.default().entity_types
        return tuple(entity_types)

    def _create_policy(self, layer_names: dict | str | None) -> LayerNamePolicy:
        """Create the layer name policy.

        Parameters
        ----------
        layer_names : dict | str | None
            Either "strict", "lenient" or a dict with StripChars and MaxLength
        """
        if layer_names is None:
            return LayerNamePolicy.lenient()
        if isinstance(layer_names, str):
            if layer_names.lower() == "strict":
                return LayerNamePolicy.strict()
            if layer_names.lower() != "lenient":
                log.warning(f"Unknown layer name policy: {layer_names}, defaulting to 'lenient'")
            return LayerNamePolicy.lenient()
        max_length = layer_names.get("MaxLength", None)
        if max_length is not None:
            max_length = int(max_length)
            if max_length <= 0:
                log.warning(f"Invalid MaxLength {max_length}, names are not truncated")
                max_length = None
        return LayerNamePolicy(
            strip_chars=layer_names.get("StripChars", ""),
            max_length=max_length,
        )

    def _create_config(self, config: dict) -> ExtractionConfig:
        default = ExtractionConfig.default()
        layer = config.get("Layer", default.layer)
        if not isinstance(layer, str) or len(layer) == 0:
            log.warning(f"Layer is empty, defaulting to '{default.layer}'")
            layer = default.layer
        return ExtractionConfig(
            layer=layer,
            entity_types=self._create_entity_types(config.get("EntityTypes")),
            strict=bool(config.get("Strict", default.strict)),
            policy=self._create_policy(config.get("LayerNames")),
            encoding=config.get("Encoding", default.encoding),
        )

    def load_config(self) -> ExtractionConfig:
        """Load extraction configuration from JSON file.

        Expected JSON format:
        {
            "Layer": "z value TN",
            "EntityTypes": ["TEXT", "POINT"],
            "Strict": false,
            "LayerNames": {"StripChars": "<>:;?*|=", "MaxLength": 255},
            "Encoding": "utf-8"
        }

        Raises
        ------
        FileNotFoundError
            If configuration file does not exist
        json.JSONDecodeError
            If configuration file is not valid JSON
        ValueError
            If the JSON document is not an object
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, encoding="utf-8") as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise json.JSONDecodeError(
                f"Invalid JSON in configuration file {self.config_path}: {e.msg}", e.doc, e.pos
            ) from e

        if not isinstance(config_data, dict):
            raise ValueError(f"Configuration must be a JSON object: {self.config_path}")
        self.config = self._create_config(config_data)
        log.info(f"Loaded configuration from {self.config_path}")
        return self.config


def sample_config() -> dict:
    """Get a sample configuration as written by ``create-config``."""
    return {
        "Layer": "z value TN",
        "EntityTypes": ["TEXT", "POINT"],
        "Strict": False,
        "LayerNames": {"StripChars": "", "MaxLength": None},
        "Encoding": "utf-8",
    }
