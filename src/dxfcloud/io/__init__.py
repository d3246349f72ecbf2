"""DXF I/O package.

This package provides:
- tokenize / TokenCursor: Group code/value pairing of the file lines
- DXFReader: File loading and layer extraction
- parse_layers: Layer extraction from lines already in memory
"""

from .dxf_reader import DXFReader, DxfStructureError, parse_layers, read_file
from .tokenizer import TokenCursor, tokenize

__all__ = [
    "DXFReader",
    "DxfStructureError",
    "TokenCursor",
    "parse_layers",
    "read_file",
    "tokenize",
]
