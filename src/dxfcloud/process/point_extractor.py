"""Point extraction from the entities of one DXF layer.

This module walks the entities of a layer, decodes the coordinates of the
entity types it knows (TEXT, POINT) and loads them into a PointCloud.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from ..models import DxfEntity, DxfLayer, ExtractionConfig, Point3D
from ..protocols import IPointDecoder
from .point_cloud import PointCloud

log = logging.getLogger(__name__)

CODE_TEXT = 1
CODE_X = 10
CODE_Y = 20
CODE_Z = 30


def _coordinate(entity: DxfEntity, code: int, default: str = "0") -> float:
    value = entity.get(code)
    if value is None or len(value.strip()) == 0:
        value = default
    return float(value)


class TextPointDecoder:
    """Decodes TEXT entities whose content is the elevation of the insert point.

    X and Y come from the insert point (group codes 10/20), Z is parsed
    from the text content (group code 1).
    """

    entity_type = "TEXT"

    def decode(self, entity: DxfEntity) -> Point3D | None:
        try:
            x = _coordinate(entity, CODE_X)
            y = _coordinate(entity, CODE_Y)
            z = float((entity.get(CODE_TEXT) or "").strip())
        except ValueError as e:
            log.warning(f"Skipping invalid {self.entity_type} point: {e}")
            return None
        return Point3D(x=x, y=y, z=z)


class PointEntityDecoder:
    """Decodes POINT entities from their location (group codes 10/20/30)."""

    entity_type = "POINT"

    def decode(self, entity: DxfEntity) -> Point3D | None:
        try:
            return Point3D(
                x=_coordinate(entity, CODE_X),
                y=_coordinate(entity, CODE_Y),
                z=_coordinate(entity, CODE_Z),
            )
        except ValueError as e:
            log.warning(f"Skipping invalid {self.entity_type} point: {e}")
            return None


def default_decoders() -> list[IPointDecoder]:
    return [TextPointDecoder(), PointEntityDecoder()]


@dataclass
class ExtractionResult:
    """Points extracted from one layer and the counts of the extraction."""

    layer: str
    cloud: PointCloud = field(default_factory=PointCloud)
    processed: int = 0
    skipped: int = 0
    ignored: int = 0
    duplicates: int = 0

    @property
    def valid(self) -> int:
        return len(self.cloud)


class PointExtractor:
    """Extracts points from the entities of a layer.

    Each entity type is decoded by the decoder registered for it, entities
    of other types are ignored. Valid points get consecutive ids.
    """

    def __init__(self, decoders: Iterable[IPointDecoder] | None = None, start_id: int = 1) -> None:
        """Initialize extractor with decoders.

        Parameters
        ----------
        decoders : Iterable[IPointDecoder] | None
            Decoders by entity type, None uses the TEXT and POINT decoders
        start_id : int
            Id of the first extracted point
        """
        if decoders is None:
            decoders = default_decoders()
        self.decoders: dict[str, IPointDecoder] = {decoder.entity_type.upper(): decoder for decoder in decoders}
        self.start_id = start_id

    def extract(self, layer: DxfLayer, cloud: PointCloud | None = None) -> ExtractionResult:
        """Extract the points of a layer.

        Parameters
        ----------
        layer : DxfLayer
            Layer to walk in entity order
        cloud : PointCloud | None
            Cloud to add the points to, None creates a new one

        Returns
        -------
        ExtractionResult
            Cloud with the extracted points and the extraction counts
        """
        result = ExtractionResult(layer=layer.name, cloud=cloud if cloud is not None else PointCloud())
        next_id = self.start_id
        for entity in layer.entities:
            decoder = self.decoders.get(entity.type.upper())
            if decoder is None:
                result.ignored += 1
                continue
            result.processed += 1
            point = decoder.decode(entity)
            if point is None:
                result.skipped += 1
                continue
            if not result.cloud.add_point(next_id, point):
                log.warning(f"Point id {next_id} already exists in the cloud, skipping {point}")
                result.duplicates += 1
            next_id += 1

        log.info(
            f"Extracted {result.valid} points from {result.processed} entities of layer '{layer.name}' "
            f"({result.skipped} skipped, {result.ignored} ignored)"
        )
        return result


def extract_points(layers: Mapping[str, DxfLayer], config: ExtractionConfig) -> ExtractionResult | None:
    """Extract points from the layer named in the configuration.

    Parameters
    ----------
    layers : Mapping[str, DxfLayer]
        Parsed layers by name
    config : ExtractionConfig
        Target layer and entity types

    Returns
    -------
    ExtractionResult | None
        Extraction result, None if the layer does not exist
    """
    layer = layers.get(config.layer)
    if layer is None:
        log.warning(f"Layer '{config.layer}' not found")
        return None

    decoders = []
    for decoder in default_decoders():
        if decoder.entity_type in config.entity_types:
            decoders.append(decoder)
    known = {decoder.entity_type for decoder in decoders}
    for entity_type in config.entity_types:
        if entity_type not in known:
            log.debug(f"No point decoder for entity type '{entity_type}'")
    return PointExtractor(decoders).extract(layer)
