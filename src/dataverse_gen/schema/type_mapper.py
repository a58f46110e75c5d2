# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Mapping of platform types to :class:`~dataverse_gen.models.type_descriptor.TypeDescriptor`.

Two paths exist. Properties (entity columns, complex type members, navigation
targets) resolve to a single descriptor. Action and function parameters also
get a structural category, and entity-valued parameters resolve to two
candidates: the generic ``EntityReference`` and the concrete entity.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..common.constants import (
    BASE_ENTITY_NAME,
    DATAVERSE_ALIAS,
    DATAVERSE_NAMESPACE,
    EDM_PREFIX,
    ENTITY_REFERENCE_TYPE,
    ENTITYSET_PARAMETER_NAME,
    REFERENCED_TYPES_COMPLEX_TYPES,
    REFERENCED_TYPES_ENTITY_TYPES,
    REFERENCED_TYPES_ENUMS,
)
from ..core.config import GeneratorConfig
from ..models.edmx import ComplexType, EntityType, EntityTypeProperty, EnumType, FunctionParameter
from ..models.type_descriptor import OutputType, StructuralCategory, TypeDescriptor
from ._names import is_collection, last_segment, remove_collection

logger = logging.getLogger(__name__)

# Platform type -> (target type name, form attribute kind)
_PROPERTY_TYPE_MAP: Dict[str, Tuple[str, Optional[str]]] = {
    "MultiSelectPicklistType": ("number[]", None),
    "PicklistType": ("number", "OptionSet"),
    "StateType": ("number", "OptionSet"),
    "StatusType": ("number", "OptionSet"),
    "Edm.Guid": ("Guid", None),
    "UniqueidentifierType": ("Guid", None),
    "ImageType": ("string", "String"),
    "FileType": ("string", "String"),
    "Edm.String": ("string", "String"),
    "StringType": ("string", "String"),
    "Edm.Duration": ("string", "String"),
    "Edm.Binary": ("string", "String"),
    "MemoType": ("string", "String"),
    "EntityNameType": ("string", "String"),
    "Edm.Int16": ("number", "Number"),
    "Edm.Int32": ("number", "Number"),
    "BigIntType": ("number", "Number"),
    "IntegerType": ("number", "Number"),
    "Edm.Int64": ("number", "Number"),
    "Edm.Double": ("number", "Number"),
    "DoubleType": ("number", "Number"),
    "Edm.Decimal": ("number", "Number"),
    "DecimalType": ("number", "Number"),
    "MoneyType": ("number", "Number"),
    "Edm.Boolean": ("boolean", "Boolean"),
    "BooleanType": ("boolean", "Boolean"),
    "Edm.DateTimeOffset": ("Date", "Date"),
    "DateTimeType": ("Date", "Date"),
    "CustomerType": (ENTITY_REFERENCE_TYPE, "Lookup"),
    "LookupType": (ENTITY_REFERENCE_TYPE, "Lookup"),
    "OwnerType": (ENTITY_REFERENCE_TYPE, "Lookup"),
    "PartyListType": ("ActivityParty[]", "OptionSet"),
    "ManagedPropertyType": ("number", None),
}

_PARAMETER_PRIMITIVE_MAP: Dict[str, str] = {
    "Edm.Guid": "Guid",
    "Edm.String": "string",
    "Edm.Duration": "string",
    "Edm.Binary": "string",
    "Edm.Int16": "number",
    "Edm.Int32": "number",
    "Edm.Int64": "number",
    "Edm.Double": "number",
    "Edm.Decimal": "number",
    "Edm.Boolean": "boolean",
    "Edm.DateTimeOffset": "Date",
}

_ARRAY = "[]"


class TypeMapper:
    """
    Resolves raw platform types against the types of one schema model.

    :param config: Generator options supplying type renames and import locations.
    :type config: ~dataverse_gen.core.config.GeneratorConfig
    :param entity_types: Entities in the model (enriched, so ``schema_name`` is set).
    :type entity_types: Sequence[EntityType]
    :param complex_types: Complex types in the model, after renames.
    :type complex_types: Sequence[ComplexType]
    :param enum_types: Enums in the model.
    :type enum_types: Sequence[EnumType]
    """

    def __init__(
        self,
        config: GeneratorConfig,
        entity_types: Sequence[EntityType],
        complex_types: Sequence[ComplexType],
        enum_types: Sequence[EnumType],
    ) -> None:
        self._config = config
        self._entity_types = list(entity_types)
        self._complex_types = {c.name: c for c in reversed(list(complex_types))}
        self._enum_types = {e.name: e for e in reversed(list(enum_types))}

    # ----------------------------------------------------------- property path

    def resolve_property_type(self, prop: EntityTypeProperty) -> TypeDescriptor:
        """
        Resolve the type of a structural property.

        A property whose type names a known enum is marked ``is_enum`` as a
        side effect.

        :param prop: Entity, complex type, action or function property.
        :type prop: EntityTypeProperty
        :return: The resolved type.
        :rtype: TypeDescriptor
        """
        descriptor, is_enum = self._resolve(prop.type, prop.is_enum, prop.is_multi_select)
        if is_enum:
            prop.is_enum = True
        return descriptor

    def resolve_type(self, raw_type: str, is_collection_type: bool = False) -> TypeDescriptor:
        """
        Resolve a bare type reference such as a navigation target or a return type.

        :param raw_type: Type name, optionally wrapped in ``Collection(...)``.
        :type raw_type: str
        :param is_collection_type: Treat the type as a collection even without the wrapper.
        :type is_collection_type: bool
        """
        if is_collection_type and not is_collection(raw_type):
            raw_type = f"Collection({raw_type})"
        descriptor, _ = self._resolve(raw_type, False, False)
        return descriptor

    def _resolve(self, raw_type: str, is_enum: bool, is_multi_select: bool) -> Tuple[TypeDescriptor, bool]:
        collection = is_collection(raw_type)
        platform_type = remove_collection(raw_type)
        mapped = _PROPERTY_TYPE_MAP.get(platform_type)
        if mapped is not None:
            type_name, field_kind = mapped
        else:
            type_name = last_segment(platform_type) if "." in platform_type else platform_type
            field_kind = None

        if type_name == BASE_ENTITY_NAME:
            if collection or is_multi_select:
                type_name += _ARRAY
            return TypeDescriptor(name=type_name, output_type=OutputType.UNKNOWN, is_collection=collection), is_enum

        output_type = OutputType.ENUM if is_enum else OutputType.PRIMITIVE
        if type_name in self._enum_types:
            is_enum = True
            output_type = OutputType.ENUM

        # Renames such as Object -> ObjectValue apply whatever the kind
        type_name = self._config.mapped_type_name(type_name)

        entity = self._find_entity(type_name)
        if entity is not None:
            type_name = entity.schema_name or entity.name
            output_type = OutputType.ENTITY
        if type_name in self._complex_types:
            output_type = OutputType.COMPLEX

        if (collection or is_multi_select) and not type_name.endswith(_ARRAY):
            type_name += _ARRAY
        if is_enum:
            field_kind = "OptionSet"

        descriptor = TypeDescriptor(
            name=type_name,
            output_type=output_type,
            import_location=self.resolve_import_location(type_name, output_type),
            is_collection=type_name.endswith(_ARRAY),
            field_kind=field_kind,
        )
        return descriptor, is_enum

    def _find_entity(self, type_name: str) -> Optional[EntityType]:
        return next(
            (e for e in self._entity_types if e.schema_name == type_name or e.name == type_name),
            None,
        )

    # ---------------------------------------------------------- parameter path

    def resolve_parameter_type(self, parameter: FunctionParameter) -> List[TypeDescriptor]:
        """
        Resolve an action or function parameter.

        Sets ``parameter.structural_type_name`` and returns the candidate types.
        A collection-typed binding parameter named ``entityset`` is corrected
        to the single entity type it is bound to: the ``Collection(...)``
        wrapper is removed from ``parameter.type`` and the category becomes
        ``EntityType``.

        :param parameter: The parameter to resolve.
        :type parameter: FunctionParameter
        :return: One or more candidate types.
        :rtype: list[TypeDescriptor]
        """
        category = self.structural_category(parameter.type)
        if parameter.name == ENTITYSET_PARAMETER_NAME and category is StructuralCategory.COLLECTION:
            parameter.type = remove_collection(parameter.type)
            parameter.structural_type_name = StructuralCategory.ENTITY_TYPE.type_name
            return self._entity_candidates(last_segment(parameter.type), collection=False)

        parameter.structural_type_name = category.type_name
        collection = category is StructuralCategory.COLLECTION
        inner_type = remove_collection(parameter.type)
        if collection:
            category = self.structural_category(inner_type)
        return self._parameter_candidates(inner_type, category, collection)

    def structural_category(self, raw_type: str) -> StructuralCategory:
        """
        Return the structural category of a parameter type.

        A collection wrapper wins over everything else. Entities take precedence
        over complex types with the same short name.
        """
        if is_collection(raw_type):
            return StructuralCategory.COLLECTION
        if raw_type.startswith(f"{EDM_PREFIX}."):
            return StructuralCategory.PRIMITIVE_TYPE
        short_name = last_segment(raw_type)
        if short_name == BASE_ENTITY_NAME:
            return StructuralCategory.ENTITY_TYPE
        if self._is_schema_type(raw_type):
            if self._find_entity_by_logical_name(short_name) is not None:
                return StructuralCategory.ENTITY_TYPE
            if short_name in self._enum_types:
                return StructuralCategory.ENUMERATION_TYPE
            if self._config.mapped_type_name(short_name) in self._complex_types:
                return StructuralCategory.COMPLEX_TYPE
        return StructuralCategory.UNKNOWN

    def _parameter_candidates(
        self, inner_type: str, category: StructuralCategory, collection: bool
    ) -> List[TypeDescriptor]:
        suffix = _ARRAY if collection else ""
        short_name = last_segment(inner_type)

        if category is StructuralCategory.PRIMITIVE_TYPE:
            type_name = _PARAMETER_PRIMITIVE_MAP.get(inner_type)
            if type_name is None:
                logger.debug("No primitive mapping for %s", inner_type)
                return [TypeDescriptor(name=inner_type + suffix, output_type=OutputType.UNKNOWN, is_collection=collection)]
            return [self._descriptor(type_name + suffix, OutputType.PRIMITIVE, collection)]

        if category is StructuralCategory.ENTITY_TYPE:
            return self._entity_candidates(short_name, collection)
        if category is StructuralCategory.ENUMERATION_TYPE:
            return [self._descriptor(self._enum_types[short_name].name + suffix, OutputType.ENUM, collection)]
        if category is StructuralCategory.COMPLEX_TYPE:
            complex_type = self._complex_types[self._config.mapped_type_name(short_name)]
            return [self._descriptor(complex_type.name + suffix, OutputType.COMPLEX, collection)]

        logger.debug("Parameter type %s did not match a known type", inner_type)
        return [TypeDescriptor(name=short_name + suffix, output_type=OutputType.UNKNOWN, is_collection=collection)]

    def _entity_candidates(self, logical_name: str, collection: bool) -> List[TypeDescriptor]:
        """``EntityReference`` plus the concrete entity, or an unknown type for the base entity."""
        suffix = _ARRAY if collection else ""
        if logical_name == BASE_ENTITY_NAME:
            return [TypeDescriptor(name=logical_name + suffix, output_type=OutputType.UNKNOWN, is_collection=collection)]
        entity = self._find_entity_by_logical_name(logical_name)
        entity_name = (entity.schema_name or entity.name) if entity is not None else logical_name
        return [
            self._descriptor(ENTITY_REFERENCE_TYPE + suffix, OutputType.ENTITY, collection),
            self._descriptor(entity_name + suffix, OutputType.ENTITY, collection),
        ]

    def _descriptor(self, type_name: str, output_type: OutputType, collection: bool) -> TypeDescriptor:
        return TypeDescriptor(
            name=type_name,
            output_type=output_type,
            import_location=self.resolve_import_location(type_name, output_type),
            is_collection=collection,
        )

    def _find_entity_by_logical_name(self, logical_name: str) -> Optional[EntityType]:
        lowered = logical_name.lower()
        return next((e for e in self._entity_types if e.name.lower() == lowered), None)

    @staticmethod
    def _is_schema_type(raw_type: str) -> bool:
        return raw_type.startswith(f"{DATAVERSE_ALIAS}.") or raw_type.startswith(f"{DATAVERSE_NAMESPACE}.")

    # ------------------------------------------------------------ import paths

    def resolve_import_location(self, type_name: str, output_type: OutputType) -> Optional[str]:
        """
        Return the module a type is imported from.

        An exact ``referencedTypes`` entry wins; otherwise enums, entities and
        complex types use their category prefix followed by the type name.
        Primitive and unknown types have no import unless configured.

        :raises ~dataverse_gen.core.errors.ConfigurationError: If the category prefix is not configured.
        """
        base_name = type_name[: -len(_ARRAY)] if type_name.endswith(_ARRAY) else type_name
        override = self._config.referenced_types.get(base_name)
        if override is not None:
            return override.import_
        if output_type is OutputType.ENUM:
            return self._config.import_prefix(REFERENCED_TYPES_ENUMS) + base_name
        if output_type is OutputType.ENTITY:
            return self._config.import_prefix(REFERENCED_TYPES_ENTITY_TYPES) + base_name
        if output_type is OutputType.COMPLEX:
            return self._config.import_prefix(REFERENCED_TYPES_COMPLEX_TYPES) + base_name
        return None


__all__ = ["TypeMapper"]
