"""Protocol definitions for point decoding strategies.

This module defines the interface that allows points to be decoded from
different entity types, following the open entity type tag of the DXF format.
"""

from typing import Protocol

from .models import DxfEntity, Point3D


class IPointDecoder(Protocol):
    """Protocol for decoding a 3D point from one entity type.

    Implementations read the raw group code values of an entity and
    convert them to coordinates.
    """

    entity_type: str

    def decode(self, entity: DxfEntity) -> Point3D | None:
        """Decode the point of an entity.

        Parameters
        ----------
        entity : DxfEntity
            Entity of the type handled by this decoder

        Returns
        -------
        Point3D | None
            Decoded point, None if the entity values are not valid numbers
        """
        ...

