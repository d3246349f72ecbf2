"""Read layers and entities from ASCII DXF files and query extracted 3D points."""

from .io import DXFReader, DxfStructureError, parse_layers
from .models import DxfEntity, DxfLayer, ExtractionConfig, LayerNamePolicy, LayerRegistry, Point3D
from .process import PointCloud, PointExtractor, analyze_points, extract_points

__all__ = [
    "DXFReader",
    "DxfStructureError",
    "parse_layers",
    "DxfEntity",
    "DxfLayer",
    "ExtractionConfig",
    "LayerNamePolicy",
    "LayerRegistry",
    "Point3D",
    "PointCloud",
    "PointExtractor",
    "analyze_points",
    "extract_points",
]
