"""DXF reader reconstructing layers and entities from an ASCII DXF stream.

The parser makes one forward pass over the group code/value tokens. The
:class:`SectionDispatcher` recognizes the SECTION/ENDSEC framing and hands the
TABLES section to the :class:`TableParser` and the ENTITIES section to the
:class:`EntityParser`. Both fill the same :class:`LayerRegistry`.
"""

import logging
from collections.abc import Iterable
from enum import Enum
from pathlib import Path

from ..models import (
    DEFAULT_COLOR,
    DEFAULT_LAYER,
    DEFAULT_LINE_TYPE,
    DxfEntity,
    LayerNamePolicy,
    LayerRegistry,
)
from .tokenizer import TokenCursor

log = logging.getLogger(__name__)

SECTION = "SECTION"
ENDSEC = "ENDSEC"
TABLES = "TABLES"
ENTITIES = "ENTITIES"
TABLE = "TABLE"
ENDTAB = "ENDTAB"
LAYER = "LAYER"

CODE_MARKER = 0
CODE_NAME = 2
CODE_LINE_TYPE = 6
CODE_LAYER = 8
CODE_COLOR = 62


class DxfStructureError(ValueError):
    """Raised in strict mode when a structural marker of the DXF file is missing."""


class SectionState(Enum):
    IDLE = "IDLE"
    AWAITING_SECTION_NAME = "AWAITING_SECTION_NAME"
    ROUTING_TABLES = "ROUTING_TABLES"
    ROUTING_ENTITIES = "ROUTING_ENTITIES"
    SKIPPING_UNKNOWN = "SKIPPING_UNKNOWN"


def parse_color(value: str) -> int:
    """Parse the raw color of a layer definition, falling back to the default color."""
    try:
        return int(value)
    except ValueError:
        log.warning(f"Invalid layer color '{value}', defaulting to {DEFAULT_COLOR}")
        return DEFAULT_COLOR


def read_name(cursor: TokenCursor) -> str:
    """Read the name following a SECTION or TABLE marker.

    If the next token is not a name token it is given back to the cursor and
    an empty name is returned.
    """
    token = cursor.next()
    if token is None:
        return ""
    if token.code != CODE_NAME:
        cursor.unread(token)
        return ""
    return token.value


def skip_to(cursor: TokenCursor, marker: str) -> bool:
    """Discard tokens up to and including the given ``0`` marker.

    Returns
    -------
    bool
        True if the marker was found, False if the stream ran out before
    """
    for token in cursor:
        if token.is_marker(marker):
            return True
    return False


class _SectionParser:
    def __init__(self, cursor: TokenCursor, registry: LayerRegistry, strict: bool = False) -> None:
        self.cursor = cursor
        self.registry = registry
        self.strict = strict

    def _unclosed(self, marker: str, block: str) -> None:
        message = f"{block} is not closed by {marker} before the end of the file"
        if self.strict:
            raise DxfStructureError(message)
        log.warning(message)


class TableParser(_SectionParser):
    """Parses the TABLES section, in particular the LAYER table."""

    def parse(self) -> None:
        for token in self.cursor:
            if token.code != CODE_MARKER:
                continue
            if token.value == ENDSEC:
                return
            if token.value == TABLE:
                self._parse_table()
        self._unclosed(ENDSEC, f"Section '{TABLES}'")

    def _parse_table(self) -> None:
        table_name = read_name(self.cursor)
        if table_name == LAYER:
            self._parse_layer_table()
            return
        log.debug(f"Skipping table '{table_name}'")
        if not skip_to(self.cursor, ENDTAB):
            self._unclosed(ENDTAB, f"Table '{table_name}'")

    def _parse_layer_table(self) -> None:
        for token in self.cursor:
            if token.code != CODE_MARKER:
                continue
            if token.value == ENDTAB:
                return
            if token.value == LAYER:
                self._parse_layer_definition()
        self._unclosed(ENDTAB, f"Table '{LAYER}'")

    def _parse_layer_definition(self) -> None:
        """Read the fields of one layer up to the next ``0`` token.

        The ``0`` token belongs to the layer table loop and is given back.
        """
        name = ""
        raw_color = DEFAULT_COLOR
        line_type = DEFAULT_LINE_TYPE
        for token in self.cursor:
            if token.code == CODE_MARKER:
                self.cursor.unread(token)
                break
            if token.code == CODE_NAME:
                name = token.value
            elif token.code == CODE_COLOR:
                raw_color = parse_color(token.value)
            elif token.code == CODE_LINE_TYPE:
                line_type = token.value

        if not name:
            log.debug("Skipping layer definition without name")
            return
        stored_name = self.registry.define_layer(name, raw_color, line_type)
        log.debug(f"Defined layer '{stored_name}' color={raw_color} line_type={line_type}")


class EntityParser(_SectionParser):
    """Parses the ENTITIES section into per-layer entity lists.

    An entity starts with a ``0`` token carrying its type and ends at the next
    ``0`` token. The layer given by group code 8 stays active for the
    following entities until another layer is named.
    """

    def parse(self) -> None:
        layer_name = DEFAULT_LAYER
        entity_type = ""
        fields: dict[int, str] = {}
        for token in self.cursor:
            if token.code == CODE_MARKER:
                if entity_type:
                    self._flush(layer_name, entity_type, fields)
                    fields = {}
                if token.value == ENDSEC:
                    return
                entity_type = token.value
                continue
            if token.code == CODE_LAYER:
                layer_name = token.value
                continue
            if token.code is None:
                continue
            fields[token.code] = token.value

        if entity_type:
            log.warning(f"Adding pending '{entity_type}' entity at the end of the file")
            self._flush(layer_name, entity_type, fields)
        self._unclosed(ENDSEC, f"Section '{ENTITIES}'")

    def _flush(self, layer_name: str, entity_type: str, fields: dict[int, str]) -> None:
        self.registry.add_entity(layer_name, DxfEntity(type=entity_type, fields=fields))


class SectionDispatcher:
    """Top level loop routing each section of the stream to its parser."""

    def __init__(self, cursor: TokenCursor, registry: LayerRegistry, strict: bool = False) -> None:
        self.cursor = cursor
        self.registry = registry
        self.strict = strict
        self.state = SectionState.IDLE
        self.sections: list[str] = []
        self._tables = TableParser(cursor, registry, strict)
        self._entities = EntityParser(cursor, registry, strict)

    def run(self) -> LayerRegistry:
        """Consume the whole stream and return the filled registry."""
        for token in self.cursor:
            if token.is_marker(SECTION):
                self._dispatch_section()

        if not self.sections and self.cursor.has_content:
            message = f"No {SECTION} marker found, the input is not an ASCII DXF file"
            if self.strict:
                raise DxfStructureError(message)
            log.warning(message)
        return self.registry

    def _dispatch_section(self) -> None:
        self.state = SectionState.AWAITING_SECTION_NAME
        name = read_name(self.cursor)
        self.sections.append(name)
        if name == TABLES:
            self.state = SectionState.ROUTING_TABLES
            self._tables.parse()
        elif name == ENTITIES:
            self.state = SectionState.ROUTING_ENTITIES
            self._entities.parse()
        else:
            self.state = SectionState.SKIPPING_UNKNOWN
            log.debug(f"Skipping section '{name}'")
            if not skip_to(self.cursor, ENDSEC):
                message = f"Section '{name}' is not closed by {ENDSEC} before the end of the file"
                if self.strict:
                    raise DxfStructureError(message)
                log.warning(message)
        self.state = SectionState.IDLE


def parse_layers(
    lines: Iterable[str],
    strict: bool = False,
    policy: LayerNamePolicy | None = None,
) -> LayerRegistry:
    """Parse the lines of an ASCII DXF file into a frozen layer registry.

    Parameters
    ----------
    lines : Iterable[str]
        Lines of the DXF file
    strict : bool
        Raise :class:`DxfStructureError` on missing structural markers
        instead of returning what could be read
    policy : LayerNamePolicy | None
        Sanitization of layer names, None keeps names unchanged

    Returns
    -------
    LayerRegistry
        Layers by name, each with its style and entities
    """
    cursor = TokenCursor.from_lines(lines)
    registry = LayerRegistry(policy=policy)
    SectionDispatcher(cursor, registry, strict=strict).run()
    return registry.freeze()


def read_file(dxf_path: Path, encoding: str = "utf-8") -> list[str]:
    """Read all lines of a DXF file.

    Raises
    ------
    FileNotFoundError
        If the DXF file does not exist
    IsADirectoryError
        If the path is a directory
    OSError
        If the path is not a regular file or cannot be read
    """
    if not dxf_path.exists():
        raise FileNotFoundError(f"DXF file not found: {dxf_path}")
    if dxf_path.is_dir():
        raise IsADirectoryError(f"DXF path is a directory: {dxf_path}")
    if not dxf_path.is_file():
        raise OSError(f"DXF path is not a regular file: {dxf_path}")
    with open(dxf_path, encoding=encoding) as f:
        return f.read().splitlines()


class DXFReader:
    """DXF file reader extracting the layers and their entities.

    The reader handles one file: :meth:`load_file` reads the lines and
    :meth:`read_layers` parses them once, later calls return the same registry.
    """

    def __init__(
        self,
        dxf_path: Path,
        strict: bool = False,
        policy: LayerNamePolicy | None = None,
        encoding: str = "utf-8",
    ) -> None:
        """Initialize DXF reader with file path.

        Parameters
        ----------
        dxf_path : Path
            Path to the DXF file to process
        strict : bool
            Fail on missing structural markers instead of reading leniently
        policy : LayerNamePolicy | None
            Sanitization of layer names
        encoding : str
            Text encoding of the DXF file
        """
        self.dxf_path = dxf_path
        self.strict = strict
        self.policy = policy
        self.encoding = encoding
        self._lines: list[str] | None = None
        self._layers: LayerRegistry | None = None

    def load_file(self) -> None:
        """Read the lines of the DXF file.

        Raises
        ------
        FileNotFoundError
            If DXF file does not exist
        OSError
            If the path is not a readable regular file
        """
        self._lines = read_file(self.dxf_path, self.encoding)
        log.info(f"Successfully loaded DXF file: {self.dxf_path} ({len(self._lines)} lines)")

    def is_loaded(self) -> bool:
        return self._lines is not None

    def read_layers(self) -> LayerRegistry:
        """Parse the loaded file into layers.

        Raises
        ------
        RuntimeError
            If DXF file is not loaded
        DxfStructureError
            In strict mode, if a structural marker is missing
        """
        if self._layers is not None:
            return self._layers
        if self._lines is None:
            raise RuntimeError("DXF file not loaded. Call load_file() first.")
        self._layers = parse_layers(self._lines, strict=self.strict, policy=self.policy)
        log.info(f"Read {len(self._layers)} layers from {self.dxf_path.name}")
        return self._layers

    @property
    def layers(self) -> LayerRegistry:
        """Get the parsed layers.

        Raises
        ------
        RuntimeError
            If the layers were not read yet
        """
        if self._layers is None:
            raise RuntimeError("DXF layers not read. Call read_layers() first.")
        return self._layers

    def get_layer_names(self) -> list[str]:
        """Get all layer names sorted case-insensitively."""
        return [layer.name for layer in self.layers.sorted_layers()]
