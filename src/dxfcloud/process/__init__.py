from .point_cloud import PointAnalysis, PointCloud, analyze_points
from .point_extractor import (
    ExtractionResult,
    PointEntityDecoder,
    PointExtractor,
    TextPointDecoder,
    default_decoders,
    extract_points,
)

__all__ = [
    "PointCloud",
    "PointAnalysis",
    "analyze_points",
    "ExtractionResult",
    "PointExtractor",
    "TextPointDecoder",
    "PointEntityDecoder",
    "default_decoders",
    "extract_points",
]
