# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
EDMX document parser.

Turns the ``$metadata`` document of a Dataverse environment into a
:class:`~dataverse_gen.models.edmx.SchemaGraph`. Only the first ``Schema``
element of ``DataServices`` is read; Dataverse publishes everything under
``Microsoft.Dynamics.CRM``.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

from lxml import etree

from ..common.constants import EDM_NAMESPACES, EDMX_NAMESPACES, SYSTEM_ENTITIES
from ..core._error_codes import EDMX_MISSING_ELEMENT, EDMX_SYNTAX_ERROR, EDMX_UNSUPPORTED_NAMESPACE
from ..core.errors import EdmxStructureError
from ..models.edmx import (
    ComplexType,
    EntitySet,
    EntityType,
    EntityTypeProperty,
    EnumMember,
    EnumType,
    FunctionParameter,
    FunctionType,
    NavigationProperty,
    SchemaGraph,
)
from ._names import is_collection, last_segment, remove_collection

logger = logging.getLogger(__name__)


def _localname(element: Any) -> str:
    return etree.QName(element.tag).localname


def _child(parent: Any, name: str) -> Optional[Any]:
    """Return the first child element named ``name`` or None."""
    return next((child for child in _elements(parent) if _localname(child) == name), None)


def _children(parent: Optional[Any], name: str) -> List[Any]:
    """
    Return every child element named ``name``.

    The result is always a list: an absent element gives ``[]`` and a single
    element gives a list of one. The rest of the parser only reads children
    through this function.
    """
    if parent is None:
        return []
    return [child for child in _elements(parent) if _localname(child) == name]


def _elements(parent: Any) -> List[Any]:
    # Comments and processing instructions have a non-string tag
    return [child for child in parent if isinstance(child.tag, str)]


def _flag(element: Any, name: str) -> bool:
    return element.get(name) == "true"


def _int_value(value: Optional[str]) -> int:
    # Missing or non-numeric values order as 0
    try:
        return int(value) if value is not None else 0
    except ValueError:
        return 0


def _enum_sort_value(enum_type: EnumType) -> int:
    return _int_value(enum_type.value)


class EdmxParser:
    """
    Parser for Dataverse EDMX documents.

    Example::

        graph = EdmxParser().parse(edmx_text)
        names = [e.name for e in graph.entity_types]

    The parser is stateless; every call to :meth:`parse` returns a new graph.
    """

    def parse(self, edmx: Union[str, bytes]) -> SchemaGraph:
        """
        Parse an EDMX document.

        Passes run in this order: enums, entity types, entity sets (followed by
        entity set name assignment), complex types, actions, functions.

        :param edmx: The ``$metadata`` document.
        :type edmx: str or bytes
        :return: The schema graph before filtering.
        :rtype: SchemaGraph
        :raises EdmxStructureError: If the XML is malformed or ``Edmx``,
            ``DataServices``, ``Schema`` or ``EntityContainer`` is missing.
        """
        if isinstance(edmx, str):
            edmx = edmx.encode("utf-8")
        if not isinstance(edmx, bytes):
            raise TypeError(f"Expected bytes or str EDMX document, got: {type(edmx)}")

        try:
            root = etree.fromstring(edmx)
        except etree.XMLSyntaxError as ex:
            raise EdmxStructureError(
                f"EDMX document syntax error: {ex}",
                subcode=EDMX_SYNTAX_ERROR,
            ) from ex

        schema = self._find_schema(root)
        container = _child(schema, "EntityContainer")
        if container is None:
            raise EdmxStructureError(
                "EDMX document is missing the element EntityContainer",
                subcode=EDMX_MISSING_ELEMENT,
                details={"element": "EntityContainer"},
            )

        graph = SchemaGraph(namespace=schema.get("Namespace", ""), alias=schema.get("Alias"))
        self._read_enums(schema, graph)
        self._read_entity_types(schema, graph)
        self._read_entity_sets(container, graph)
        self._set_entity_set_names(graph)
        self._read_complex_types(schema, graph)
        graph.actions = self._read_functions(schema, "Action")
        graph.functions = self._read_functions(schema, "Function")

        logger.debug(
            "Parsed EDMX: %d entity types, %d entity sets, %d complex types, %d enums, %d actions, %d functions",
            len(graph.entity_types),
            len(graph.entity_sets),
            len(graph.complex_types),
            len(graph.enum_types),
            len(graph.actions),
            len(graph.functions),
        )
        return graph

    @staticmethod
    def _find_schema(root: Any) -> Any:
        if _localname(root) != "Edmx":
            raise EdmxStructureError(
                "EDMX document is missing the element Edmx",
                subcode=EDMX_MISSING_ELEMENT,
                details={"element": "Edmx"},
            )
        namespace = etree.QName(root.tag).namespace
        if namespace not in EDMX_NAMESPACES:
            raise EdmxStructureError(
                f"Unsupported Edmx namespace - {namespace}",
                subcode=EDMX_UNSUPPORTED_NAMESPACE,
                details={"namespace": namespace},
            )

        dataservices = _child(root, "DataServices")
        if dataservices is None:
            raise EdmxStructureError(
                "EDMX document is missing the element DataServices",
                subcode=EDMX_MISSING_ELEMENT,
                details={"element": "DataServices"},
            )
        schema = _child(dataservices, "Schema")
        if schema is None:
            raise EdmxStructureError(
                "EDMX document is missing the element Schema",
                subcode=EDMX_MISSING_ELEMENT,
                details={"element": "Schema"},
            )
        namespace = etree.QName(schema.tag).namespace
        if namespace not in EDM_NAMESPACES:
            raise EdmxStructureError(
                f"Unsupported Schema namespace - {namespace}",
                subcode=EDMX_UNSUPPORTED_NAMESPACE,
                details={"namespace": namespace},
            )
        return schema

    def _read_enums(self, schema: Any, graph: SchemaGraph) -> None:
        for node in _children(schema, "EnumType"):
            enum_type = EnumType(
                name=node.get("Name"),
                value=node.get("Value"),
                underlying_type=node.get("UnderlyingType"),
                is_flags=_flag(node, "IsFlags"),
                members=sorted(
                    (EnumMember(name=m.get("Name"), value=m.get("Value")) for m in _children(node, "Member")),
                    key=lambda member: _int_value(member.value),
                ),
            )
            # Insert at the value-sorted position, after any enum with an equal value
            position = len(graph.enum_types)
            sort_value = _enum_sort_value(enum_type)
            for index, existing in enumerate(graph.enum_types):
                if _enum_sort_value(existing) > sort_value:
                    position = index
                    break
            graph.enum_types.insert(position, enum_type)

    def _read_entity_types(self, schema: Any, graph: SchemaGraph) -> None:
        for node in _children(schema, "EntityType"):
            key_refs = _children(_child(node, "Key"), "PropertyRef")
            graph.entity_types.append(
                EntityType(
                    name=node.get("Name"),
                    base_type=node.get("BaseType"),
                    abstract=_flag(node, "Abstract"),
                    open_type=_flag(node, "OpenType"),
                    key_name=key_refs[0].get("Name") if key_refs else None,
                    properties=self._read_properties(node),
                    navigation_properties=self._read_navigation(node),
                )
            )
        graph.entity_types.sort(key=lambda e: e.name)

    def _read_entity_sets(self, container: Any, graph: SchemaGraph) -> None:
        for node in _children(container, "EntitySet"):
            graph.entity_sets.append(
                EntitySet(
                    name=node.get("Name"),
                    entity_set_name=node.get("Name"),
                    entity_type=node.get("EntityType"),
                )
            )
        graph.entity_sets.sort(key=lambda s: s.name)

    def _set_entity_set_names(self, graph: SchemaGraph) -> None:
        skipped = [e.name for e in graph.entity_types if e.name in SYSTEM_ENTITIES]
        if skipped:
            logger.debug("Removing system entities: %s", ", ".join(skipped))
        graph.entity_types = [e for e in graph.entity_types if e.name not in SYSTEM_ENTITIES]

        by_entity_type = {s.entity_type: s for s in reversed(graph.entity_sets)}
        for entity in graph.entity_types:
            if entity.abstract or not entity.key_name:
                continue
            entity_set = by_entity_type.get(f"{graph.namespace}.{entity.name}")
            entity.entity_set_name = entity_set.entity_set_name if entity_set is not None else None

    def _read_complex_types(self, schema: Any, graph: SchemaGraph) -> None:
        for node in _children(schema, "ComplexType"):
            graph.complex_types.append(
                ComplexType(
                    name=node.get("Name"),
                    properties=self._read_properties(node),
                    navigation_properties=self._read_navigation(node),
                )
            )
        graph.complex_types.sort(key=lambda c: c.name)

    def _read_functions(self, schema: Any, element_name: str) -> List[FunctionType]:
        """Read ``Action`` or ``Function`` elements; both share one shape."""
        operations: List[FunctionType] = []
        for node in _children(schema, element_name):
            return_type_node = _child(node, "ReturnType")
            return_type = return_type_node.get("Type") if return_type_node is not None else None
            returns_collection = is_collection(return_type)
            if returns_collection:
                return_type = remove_collection(return_type)

            parameters = [
                FunctionParameter(
                    name=p.get("Name"),
                    type=p.get("Type"),
                    nullable=p.get("Nullable") != "false",
                )
                for p in _children(node, "Parameter")
            ]
            is_bound = _flag(node, "IsBound")
            operations.append(
                FunctionType(
                    name=node.get("Name"),
                    is_bound=is_bound,
                    binding_parameter=parameters[0].name if is_bound and parameters else None,
                    return_type=return_type,
                    returns_collection=returns_collection,
                    parameters=parameters,
                    properties=self._read_properties(node),
                    navigation_properties=self._read_navigation(node),
                )
            )
        operations.sort(key=lambda o: o.name)
        return operations

    @staticmethod
    def _read_properties(node: Any) -> List[EntityTypeProperty]:
        properties = []
        for prop in _children(node, "Property"):
            nullable = prop.get("Nullable")
            properties.append(
                EntityTypeProperty(
                    name=prop.get("Name"),
                    type=prop.get("Type"),
                    nullable=None if nullable is None else nullable != "false",
                )
            )
        properties.sort(key=lambda p: p.name)
        return properties

    @staticmethod
    def _read_navigation(node: Any) -> List[NavigationProperty]:
        navigation = []
        for nav in _children(node, "NavigationProperty"):
            full_name = nav.get("Name")
            raw_type = nav.get("Type", "")
            nav_type = remove_collection(raw_type)
            constraints = _children(nav, "ReferentialConstraint")
            constraint = constraints[0] if constraints else None
            navigation.append(
                NavigationProperty(
                    name=last_segment(full_name),
                    full_name=full_name,
                    type=nav_type,
                    logical_name=last_segment(nav_type),
                    is_collection=is_collection(raw_type),
                    referenced_property=constraint.get("ReferencedProperty") if constraint is not None else None,
                    referential_constraint=constraint.get("Property") if constraint is not None else None,
                )
            )
        navigation.sort(key=lambda n: n.name)
        return navigation


__all__ = ["EdmxParser"]
