# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Schema graph nodes.

These classes represent the entity types, complex types, enumerations, entity
sets, actions and functions read from the Dataverse EDMX document. Nodes are
owned by a :class:`~dataverse_gen.schema.model.SchemaModel`; the reference
lists (``referenced_by``, ``referenced_by_root``) hold other nodes and are
excluded from equality and ``repr`` because they may form cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .type_descriptor import TypeDescriptor


def _references() -> list:
    return field(default_factory=list, compare=False, repr=False)


@dataclass
class EntityTypeProperty:
    """
    A structural property of an entity, complex type, action or function.

    Properties read from the EDMX only carry ``name``, ``type`` and ``nullable``;
    entity properties are rebuilt from attribute metadata during enrichment.

    :param name: Logical name of the property.
    :type name: str
    :param type: Raw platform type (``Edm.String``, ``mscrm.account``,
        ``PicklistType``, an enum name, ...).
    :type type: str
    :param format: ``<Format>:<DateTimeBehavior>`` for date columns.
    :type format: str
    :param type_descriptor: Resolved type, set by the type mapper.
    :type type_descriptor: TypeDescriptor or None
    """

    name: str
    type: str
    nullable: Optional[bool] = None
    schema_name: Optional[str] = None
    is_required: bool = False
    is_enum: bool = False
    is_multi_select: bool = False
    format: str = ""
    display_name: str = ""
    description: str = ""
    attribute_of: Optional[str] = None
    source_type: Optional[int] = None
    type_descriptor: Optional[TypeDescriptor] = None


@dataclass
class NavigationProperty:
    """
    A relationship-valued property.

    :param name: Short name (last dot-delimited segment of ``full_name``).
    :type name: str
    :param full_name: Name as declared in the EDMX.
    :type full_name: str
    :param type: Target type without the ``Collection(...)`` wrapper. Lookups with
        several targets hold the comma-joined target logical names.
    :type type: str
    :param logical_name: Logical name of the target, derived from ``type``.
    :type logical_name: str
    """

    name: str
    full_name: str
    type: str
    logical_name: str
    is_collection: bool = False
    referenced_property: Optional[str] = None
    referential_constraint: Optional[str] = None
    type_descriptor: Optional[TypeDescriptor] = None


@dataclass
class FunctionParameter:
    """
    A parameter of an action or function.

    :param structural_type_name: One of ``Collection``, ``EntityType``,
        ``EnumerationType``, ``PrimitiveType`` or ``Unknown``; set by the type mapper.
    :type structural_type_name: str or None
    :param type_descriptors: Candidate types (length >= 1 once resolved).
    :type type_descriptors: list[TypeDescriptor]
    """

    name: str
    type: str
    nullable: bool = True
    structural_type_name: Optional[str] = None
    type_descriptors: List[TypeDescriptor] = field(default_factory=list)


@dataclass
class FunctionType:
    """An action or function declared in the EDMX."""

    name: str
    is_bound: bool = False
    binding_parameter: Optional[str] = None
    return_type: Optional[str] = None
    returns_collection: bool = False
    parameters: List[FunctionParameter] = field(default_factory=list)
    properties: List[EntityTypeProperty] = field(default_factory=list)
    navigation_properties: List[NavigationProperty] = field(default_factory=list)
    return_type_descriptor: Optional[TypeDescriptor] = None
    referenced_by: List["FunctionType"] = _references()


ActionType = FunctionType


@dataclass
class EntityType:
    """
    A table.

    ``name`` is the logical name and the join key between EDMX data and the
    metadata API; ``schema_name`` is assigned during enrichment.
    """

    name: str
    base_type: Optional[str] = None
    abstract: bool = False
    open_type: bool = False
    key_name: Optional[str] = None
    schema_name: Optional[str] = None
    entity_set_name: Optional[str] = None
    properties: List[EntityTypeProperty] = field(default_factory=list)
    navigation_properties: List[NavigationProperty] = field(default_factory=list)
    referenced_by: List[FunctionType] = _references()


@dataclass
class ComplexType:
    name: str
    properties: List[EntityTypeProperty] = field(default_factory=list)
    navigation_properties: List[NavigationProperty] = field(default_factory=list)
    referenced_by: List[FunctionType] = _references()
    referenced_by_root: List["ComplexType"] = _references()


@dataclass
class EnumMember:
    name: str
    value: str


@dataclass
class EnumType:
    """
    An enumeration or option set.

    Members are kept in ascending order of their integer value.
    """

    name: str
    members: List[EnumMember] = field(default_factory=list)
    value: Optional[str] = None
    underlying_type: Optional[str] = None
    is_flags: bool = False
    is_global: bool = False
    referenced_by: List[FunctionType] = _references()
    referenced_by_root: List[ComplexType] = _references()


@dataclass
class EntitySet:
    name: str
    entity_set_name: str
    entity_type: str


@dataclass
class SchemaGraph:
    """
    Everything parsed from one EDMX document.

    :param namespace: Schema namespace, e.g. ``Microsoft.Dynamics.CRM``.
    :type namespace: str
    :param alias: Schema alias, e.g. ``mscrm``.
    :type alias: str or None
    """

    namespace: str
    alias: Optional[str] = None
    entity_types: List[EntityType] = field(default_factory=list)
    entity_sets: List[EntitySet] = field(default_factory=list)
    complex_types: List[ComplexType] = field(default_factory=list)
    enum_types: List[EnumType] = field(default_factory=list)
    actions: List[ActionType] = field(default_factory=list)
    functions: List[FunctionType] = field(default_factory=list)


def contains_node(nodes: List[object], node: object) -> bool:
    """Identity membership test for reference lists."""
    return any(item is node for item in nodes)


__all__ = [
    "ActionType",
    "ComplexType",
    "EntitySet",
    "EntityType",
    "EntityTypeProperty",
    "EnumMember",
    "EnumType",
    "FunctionParameter",
    "FunctionType",
    "NavigationProperty",
    "SchemaGraph",
    "contains_node",
]
