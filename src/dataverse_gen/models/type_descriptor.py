# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Semantic type descriptors produced by the type mapper.

A :class:`TypeDescriptor` carries no platform type vocabulary: it names the
target type, says which kind of generated artefact it refers to and where the
type is imported from. Templates only ever read descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class OutputType(str, Enum):
    """Kind of type a descriptor refers to."""

    ENUM = "enumType"
    ENTITY = "entityType"
    COMPLEX = "complexType"
    PRIMITIVE = "primitive"
    UNKNOWN = "unknown"


class StructuralCategory(str, Enum):
    """Structural category of an action or function parameter."""

    COLLECTION = "Collection"
    ENTITY_TYPE = "EntityType"
    ENUMERATION_TYPE = "EnumerationType"
    PRIMITIVE_TYPE = "PrimitiveType"
    COMPLEX_TYPE = "ComplexType"
    UNKNOWN = "Unknown"

    @property
    def type_name(self) -> str:
        """
        Name recorded on the parameter.

        Complex types are requested from the Web API the same way as entity
        types, so they report ``EntityType``.
        """
        if self is StructuralCategory.COMPLEX_TYPE:
            return StructuralCategory.ENTITY_TYPE.value
        return self.value


@dataclass(frozen=True)
class TypeDescriptor:
    """
    A resolved type.

    :param name: Target type name. Collections and multi-select option sets end in ``[]``.
    :type name: str
    :param output_type: Kind of the referenced type.
    :type output_type: OutputType
    :param import_location: Module the type is imported from, if any.
    :type import_location: str or None
    :param is_collection: Whether the value is an array of ``name``.
    :type is_collection: bool
    :param field_kind: Form attribute kind (``String``, ``Number``, ``Lookup``, ...)
        for entity columns; None for other types.
    :type field_kind: str or None
    """

    name: str
    output_type: OutputType
    import_location: Optional[str] = None
    is_collection: bool = False
    field_kind: Optional[str] = None

    @property
    def base_name(self) -> str:
        """The type name without the array marker."""
        return self.name[:-2] if self.name.endswith("[]") else self.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "outputType": self.output_type.value,
            "importLocation": self.import_location,
            "isCollection": self.is_collection,
            "fieldKind": self.field_kind,
        }


__all__ = ["OutputType", "StructuralCategory", "TypeDescriptor"]
