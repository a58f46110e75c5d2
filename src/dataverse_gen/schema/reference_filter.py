# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Pruning of the schema graph to the types reachable from the requested ones."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Union

from ..models.edmx import ComplexType, EntityType, EnumType, FunctionType, SchemaGraph, contains_node
from ._names import short_type_name

logger = logging.getLogger(__name__)

_Referable = Union[ComplexType, EntityType, EnumType]


class ReferenceFilter:
    """
    Mark-and-sweep over the references of the selected actions and functions.

    Entities survive when they are requested or used by a selected action or
    function. Complex types and enums survive when a selected action or
    function uses them, directly or through the properties of a surviving
    complex type. An empty allow-list selects nothing of that kind.
    """

    def filter(
        self,
        graph: SchemaGraph,
        entities: Optional[Iterable[str]] = None,
        actions: Optional[Iterable[str]] = None,
        functions: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Remove every unreachable node from ``graph``.

        :param graph: Parsed schema, mutated in place.
        :type graph: SchemaGraph
        :param entities: Logical names of the requested entities.
        :type entities: Iterable[str] or None
        :param actions: Names of the requested actions.
        :type actions: Iterable[str] or None
        :param functions: Names of the requested functions.
        :type functions: Iterable[str] or None
        """
        entity_names = set(entities or [])
        action_names = set(actions or [])
        function_names = set(functions or [])

        entity_index: Dict[str, EntityType] = {e.name: e for e in reversed(graph.entity_types)}
        complex_index: Dict[str, ComplexType] = {c.name: c for c in reversed(graph.complex_types)}
        enum_index: Dict[str, EnumType] = {e.name: e for e in reversed(graph.enum_types)}

        selected_actions = [a for a in graph.actions if a.name in action_names]
        selected_functions = [f for f in graph.functions if f.name in function_names]

        for operation in selected_actions + selected_functions:
            for parameter in operation.parameters:
                self._add_reference(parameter.type, operation, entity_index, complex_index, enum_index)
            if operation.return_type:
                self._add_reference(operation.return_type, operation, entity_index, complex_index, enum_index)

        for complex_type in [c for c in graph.complex_types if c.referenced_by]:
            self._add_complex_type_references(complex_type, complex_index, enum_index)

        graph.entity_types = [e for e in graph.entity_types if e.referenced_by or e.name in entity_names]
        graph.actions = selected_actions
        graph.functions = selected_functions
        graph.complex_types = [c for c in graph.complex_types if c.referenced_by or c.referenced_by_root]
        graph.enum_types = [e for e in graph.enum_types if e.referenced_by or e.referenced_by_root]

        missing = sorted(entity_names - {e.name for e in graph.entity_types})
        if missing:
            logger.debug("Requested entities not in the EDMX document: %s", ", ".join(missing))
        logger.debug(
            "Filtered schema: %d entities, %d actions, %d functions, %d complex types, %d enums",
            len(graph.entity_types),
            len(graph.actions),
            len(graph.functions),
            len(graph.complex_types),
            len(graph.enum_types),
        )

    @staticmethod
    def _add_reference(
        type_name: str,
        operation: FunctionType,
        entity_index: Dict[str, EntityType],
        complex_index: Dict[str, ComplexType],
        enum_index: Dict[str, EnumType],
    ) -> None:
        short_name = short_type_name(type_name)
        target: Optional[_Referable] = (
            complex_index.get(short_name) or entity_index.get(short_name) or enum_index.get(short_name)
        )
        if target is not None and not contains_node(target.referenced_by, operation):
            target.referenced_by.append(operation)

    def _add_complex_type_references(
        self,
        complex_type: ComplexType,
        complex_index: Dict[str, ComplexType],
        enum_index: Dict[str, EnumType],
    ) -> None:
        """Mark the complex types and enums used by ``complex_type``'s properties, recursively."""
        for prop in complex_type.properties:
            short_name = short_type_name(prop.type)
            matching_type = complex_index.get(short_name)
            if matching_type is not None:
                if not contains_node(matching_type.referenced_by_root, complex_type):
                    matching_type.referenced_by_root.append(complex_type)
                    self._add_complex_type_references(matching_type, complex_index, enum_index)
                continue
            matching_enum = enum_index.get(short_name)
            if matching_enum is not None and not contains_node(matching_enum.referenced_by_root, complex_type):
                matching_enum.referenced_by_root.append(complex_type)


__all__ = ["ReferenceFilter"]
