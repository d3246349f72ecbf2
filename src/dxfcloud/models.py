"""Data models for DXF layer extraction and point clouds.

This module contains the value types produced by the DXF parser (tokens,
entities, layers and the layer registry) and the 3D point used by the
point cloud.
"""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import NamedTuple

import numpy as np

log = logging.getLogger(__name__)

DEFAULT_LAYER = "0"
DEFAULT_COLOR = 7
DEFAULT_LINE_TYPE = "CONTINUOUS"
MAX_COLOR = 256

STRICT_STRIP_CHARS = '<>/\\":;?*|='
STRICT_MAX_LENGTH = 255


class Token(NamedTuple):
    """A single (group code, value) pair of the DXF stream.

    ``code`` is None when the code line is not an integer.
    """

    code: int | None
    value: str

    def is_marker(self, value: str) -> bool:
        """Check if this token is a structural ``0`` marker with the given value."""
        return self.code == 0 and self.value == value


def resolve_color(raw_color: int) -> tuple[int, bool]:
    """Split a raw layer color into color number and visibility.

    Parameters
    ----------
    raw_color : int
        Signed color from group code 62, a negative value marks the layer as off

    Returns
    -------
    tuple[int, bool]
        Absolute color number and visibility flag
    """
    visible = raw_color >= 0
    color_number = abs(raw_color)
    if color_number > MAX_COLOR:
        log.warning(f"Color {raw_color} out of range, defaulting to {DEFAULT_COLOR}")
        color_number = DEFAULT_COLOR
    return color_number, visible


@dataclass(frozen=True)
class Point3D:
    """Represents a 3D point with x, y, z coordinates.

    Points are compared and hashed by exact component equality.
    """

    x: float
    y: float
    z: float

    def to_array(self) -> np.ndarray:
        """Coordinates as a double precision array."""
        return np.array((self.x, self.y, self.z), dtype=np.float64)

    def __str__(self) -> str:
        return f"Point3D(x={self.x}, y={self.y}, z={self.z})"


@dataclass(frozen=True)
class DxfEntity:
    """One drawn object record of the ENTITIES section.

    The entity type is an open tag (TEXT, POINT, LINE, ...). Fields map group
    codes to their raw string values, the last value wins for repeated codes.
    """

    type: str
    fields: Mapping[int, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not self.type:
            raise ValueError("Entity type must not be empty")
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def get(self, code: int, default: str | None = None) -> str | None:
        """Get the raw value of a group code."""
        return self.fields.get(code, default)

    def has(self, code: int) -> bool:
        return code in self.fields


@dataclass(frozen=True)
class DxfLayer:
    """A layer with its style and the entities drawn on it."""

    name: str
    color_number: int = DEFAULT_COLOR
    line_type: str = DEFAULT_LINE_TYPE
    visible: bool = True
    entities: tuple[DxfEntity, ...] = field(default=(), repr=False, compare=False)

    @classmethod
    def create(cls, name: str) -> "DxfLayer":
        """Create a layer with the default style."""
        return cls(name=name)

    @property
    def entity_count(self) -> int:
        return len(self.entities)

    def entities_of_type(self, entity_type: str) -> list[DxfEntity]:
        """Get the entities of one type in parse order."""
        entity_type = entity_type.upper()
        return [entity for entity in self.entities if entity.type.upper() == entity_type]


@dataclass(frozen=True)
class LayerNamePolicy:
    """Sanitization applied to layer names while the registry is built.

    Parameters
    ----------
    strip_chars : str
        Characters removed from layer names
    max_length : int | None
        Maximum name length, None keeps names of any length
    """

    strip_chars: str = ""
    max_length: int | None = None

    @classmethod
    def lenient(cls) -> "LayerNamePolicy":
        return cls()

    @classmethod
    def strict(cls) -> "LayerNamePolicy":
        return cls(strip_chars=STRICT_STRIP_CHARS, max_length=STRICT_MAX_LENGTH)

    @property
    def is_identity(self) -> bool:
        return len(self.strip_chars) == 0 and self.max_length is None

    def apply(self, name: str) -> str:
        """Sanitize a layer name according to this policy."""
        if self.is_identity:
            return name
        if self.strip_chars:
            name = "".join(char for char in name if char not in self.strip_chars)
        if self.max_length is not None:
            name = name[: self.max_length]
        return name


@dataclass(frozen=True)
class ExtractionConfig:
    """Configuration for extracting points from one layer of a DXF file."""

    layer: str = "z value TN"
    entity_types: tuple[str, ...] = ("TEXT", "POINT")
    strict: bool = False
    policy: LayerNamePolicy = field(default_factory=LayerNamePolicy.lenient)
    encoding: str = "utf-8"

    @classmethod
    def default(cls) -> "ExtractionConfig":
        return cls()

    def with_overrides(self, layer: str | None = None, entity_types: tuple[str, ...] | None = None) -> "ExtractionConfig":
        """Get a copy with the given values replaced, None keeps the current value."""
        config = self
        if layer is not None:
            config = replace(config, layer=layer)
        if entity_types:
            config = replace(config, entity_types=tuple(value.upper() for value in entity_types))
        return config


@dataclass
class _LayerStyle:
    color_number: int = DEFAULT_COLOR
    line_type: str = DEFAULT_LINE_TYPE
    visible: bool = True


class LayerRegistry(Mapping[str, DxfLayer]):
    """Mapping from layer name to layer, built while a DXF stream is parsed.

    A layer is created on first reference, either from the layer table or from
    an entity drawn on it. A table definition that arrives after entities were
    attached merges its style onto the existing layer and keeps the entities.
    After :meth:`freeze` the registry is a read-only snapshot.
    """

    def __init__(self, policy: LayerNamePolicy | None = None) -> None:
        self.policy = policy or LayerNamePolicy.lenient()
        self._styles: dict[str, _LayerStyle] = {}
        self._entities: dict[str, list[DxfEntity]] = {}
        self._frozen: dict[str, DxfLayer] | None = None

    @property
    def is_frozen(self) -> bool:
        return self._frozen is not None

    def _check_mutable(self) -> None:
        if self._frozen is not None:
            raise RuntimeError("Layer registry is frozen and cannot be modified.")

    def _ensure(self, name: str) -> None:
        if name in self._styles:
            return
        log.debug(f"Creating layer '{name}' with default style")
        self._styles[name] = _LayerStyle()
        self._entities[name] = []

    def define_layer(self, name: str, raw_color: int, line_type: str) -> str | None:
        """Apply a layer table definition.

        Returns
        -------
        str | None
            Name the layer was stored under, None if the sanitized name is empty
        """
        self._check_mutable()
        name = self.policy.apply(name)
        if not name:
            log.debug("Ignoring layer definition without name")
            return None
        self._ensure(name)
        color_number, visible = resolve_color(raw_color)
        style = self._styles[name]
        style.color_number = color_number
        style.line_type = line_type or DEFAULT_LINE_TYPE
        style.visible = visible
        return name

    def add_entity(self, layer_name: str, entity: DxfEntity) -> str:
        """Append an entity to a layer, creating the layer on demand.

        Returns
        -------
        str
            Name of the layer the entity was attached to
        """
        self._check_mutable()
        name = self.policy.apply(layer_name) or DEFAULT_LAYER
        self._ensure(name)
        self._entities[name].append(entity)
        return name

    def _build(self, name: str) -> DxfLayer:
        style = self._styles[name]
        return DxfLayer(
            name=name,
            color_number=style.color_number,
            line_type=style.line_type,
            visible=style.visible,
            entities=tuple(self._entities[name]),
        )

    def freeze(self) -> "LayerRegistry":
        """Turn the registry into an immutable snapshot."""
        if self._frozen is None:
            self._frozen = {name: self._build(name) for name in self._styles}
        return self

    def __getitem__(self, name: str) -> DxfLayer:
        if self._frozen is not None:
            return self._frozen[name]
        if name not in self._styles:
            raise KeyError(name)
        return self._build(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._styles)

    def __len__(self) -> int:
        return len(self._styles)

    def __contains__(self, name: object) -> bool:
        return name in self._styles

    def sorted_layers(self) -> list[DxfLayer]:
        """Get all layers sorted case-insensitively by name."""
        return sorted(self.values(), key=lambda layer: layer.name.lower())

    def __repr__(self) -> str:
        return f"LayerRegistry(layers={list(self._styles)}, frozen={self.is_frozen})"
