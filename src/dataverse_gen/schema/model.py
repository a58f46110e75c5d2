# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Schema model orchestration.

:class:`SchemaModel` owns the schema graph of one generation run and sequences
the parser, reference filter, metadata enricher and type mapper.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from ..core.config import GeneratorConfig
from ..models.edmx import ActionType, ComplexType, EntitySet, EntityType, EnumType, FunctionType, SchemaGraph
from ..services.metadata_service import MetadataService
from .context import SchemaBuildContext
from .edmx_parser import EdmxParser
from .enricher import MetadataEnricher
from .reference_filter import ReferenceFilter
from .type_mapper import TypeMapper

logger = logging.getLogger(__name__)


class ModelState(str, Enum):
    UNLOADED = "unloaded"
    EDMX_LOADED = "edmx_loaded"
    # Filtering has started; the graph is pruned and may be partly enriched
    GENERATING = "generating"
    GENERATED = "generated"


class SchemaModel:
    """
    The schema graph of one generation run.

    :param metadata_service: Source of the EDMX document and entity metadata.
    :type metadata_service: ~dataverse_gen.services.metadata_service.MetadataService
    :param config: Generator options. Defaults to :meth:`GeneratorConfig.default`.
    :type config: ~dataverse_gen.core.config.GeneratorConfig or None

    Example::

        model = SchemaModel(service, GeneratorConfig.from_dict({"entities": ["account"]}))
        await model.generate()
        for entity in model.entity_types:
            print(entity.schema_name)

    An instance is single use: :meth:`generate` prunes and enriches the graph
    in place, so a second run needs a new instance.
    """

    def __init__(self, metadata_service: MetadataService, config: Optional[GeneratorConfig] = None) -> None:
        self.config = config or GeneratorConfig.default()
        self.state = ModelState.UNLOADED
        self._metadata_service = metadata_service
        self._context = SchemaBuildContext()
        self._graph = SchemaGraph(namespace="")

    @property
    def graph(self) -> SchemaGraph:
        return self._graph

    @property
    def entity_types(self) -> List[EntityType]:
        return self._graph.entity_types

    @property
    def entity_sets(self) -> List[EntitySet]:
        return self._graph.entity_sets

    @property
    def complex_types(self) -> List[ComplexType]:
        return self._graph.complex_types

    @property
    def enum_types(self) -> List[EnumType]:
        return self._graph.enum_types

    @property
    def actions(self) -> List[ActionType]:
        return self._graph.actions

    @property
    def functions(self) -> List[FunctionType]:
        return self._graph.functions

    async def load_edmx_metadata(self) -> None:
        """
        Fetch and parse the EDMX document. Does nothing if it is already loaded.

        :raises ~dataverse_gen.core.errors.EdmxStructureError: If the document cannot be parsed.
        """
        if self.state is not ModelState.UNLOADED:
            return
        logger.info("Fetching EDMX metadata")
        edmx = await self._metadata_service.get_edmx_metadata(use_cache=self.config.output.use_cache)
        self._graph = EdmxParser().parse(edmx)
        self.state = ModelState.EDMX_LOADED

    async def generate(self) -> None:
        """
        Build the final graph: filter, enrich every remaining entity, apply
        complex type renames and resolve every property and parameter type.

        Entities are enriched one at a time, one metadata request each.
        Errors from the metadata service propagate unchanged.

        :raises RuntimeError: If generation already ran on this instance, whether
            it completed or failed part way.
        :raises ~dataverse_gen.core.errors.ConfigurationError: If a requested
            entity does not exist on the server.
        """
        if self.state not in (ModelState.UNLOADED, ModelState.EDMX_LOADED):
            raise RuntimeError(
                f"SchemaModel.generate() can only run once (state: {self.state.value}); create a new SchemaModel"
            )
        await self.load_edmx_metadata()
        self.state = ModelState.GENERATING

        ReferenceFilter().filter(
            self._graph,
            entities=self.config.entities,
            actions=self.config.actions,
            functions=self.config.functions,
        )
        await self._add_entity_metadata()
        self._update_mapped_complex_type_names()
        self._set_type_descriptors()
        self.state = ModelState.GENERATED

    async def _add_entity_metadata(self) -> None:
        enricher = MetadataEnricher(self._context)
        for entity in self._graph.entity_types:
            logger.info("Fetching Dataverse metadata for %s", entity.name)
            response = await self._metadata_service.get_entity_metadata(entity.name)
            enricher.enrich(entity, response)
        self._graph.enum_types.extend(self._context.enum_types)

    def _update_mapped_complex_type_names(self) -> None:
        # e.g. Object -> ObjectValue so no interface shadows a built-in
        for complex_type in self._graph.complex_types:
            complex_type.name = self.config.mapped_type_name(complex_type.name)

    def _set_type_descriptors(self) -> None:
        mapper = TypeMapper(
            self.config,
            self._graph.entity_types,
            self._graph.complex_types,
            self._graph.enum_types,
        )
        for complex_type in self._graph.complex_types:
            for prop in complex_type.properties:
                prop.type_descriptor = mapper.resolve_property_type(prop)
            for nav in complex_type.navigation_properties:
                nav.type_descriptor = mapper.resolve_type(nav.type, nav.is_collection)

        for operation in self._graph.actions + self._graph.functions:
            for prop in operation.properties:
                prop.type_descriptor = mapper.resolve_property_type(prop)
            for parameter in operation.parameters:
                parameter.type_descriptors = mapper.resolve_parameter_type(parameter)
            if operation.return_type:
                operation.return_type_descriptor = mapper.resolve_type(
                    operation.return_type, operation.returns_collection
                )

        for entity in self._graph.entity_types:
            for prop in entity.properties:
                prop.type_descriptor = mapper.resolve_property_type(prop)


__all__ = ["ModelState", "SchemaModel"]
