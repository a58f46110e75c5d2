# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Enrichment of EDMX entities with attribute metadata.

The EDMX document only declares column names and OData types. The metadata
API adds what generated code needs: schema names, display names, required
levels, option sets, lookup targets and date behaviors.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from ..common.constants import (
    ATTRIBUTE_TYPE_DATETIME,
    ATTRIBUTE_TYPE_MULTISELECT_PICKLIST,
    ATTRIBUTE_TYPE_VIRTUAL,
    CONFIG_FILE_NAME,
    LOOKUP_ATTRIBUTE_TYPES,
    OPTIONSET_ATTRIBUTE_TYPES,
    REQUIRED_LEVEL_APPLICATION_REQUIRED,
)
from ..core._error_codes import CONFIG_ENTITY_NOT_FOUND, METADATA_INVALID_RESPONSE
from ..core.errors import ConfigurationError, MetadataError
from ..models.edmx import EntityType, EntityTypeProperty, EnumMember, EnumType
from ..models.entity_metadata import AttributeMetadata, EntityMetadata, OptionSetMetadata
from ._names import last_segment
from .context import SchemaBuildContext

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w]", re.ASCII)


def make_code_safe(name: str) -> str:
    """
    Turn an option label into an identifier.

    Non-word characters are removed, one leading underscore is dropped unless
    it is the whole name, and names starting with a digit get a ``_`` prefix.

    >>> make_code_safe("50% Complete")
    '_50Complete'
    """
    name = _NON_WORD.sub("", name)
    if name.startswith("_") and len(name) > 1:
        name = name[1:]
    if name[:1].isdigit():
        name = f"_{name}"
    return name


class MetadataEnricher:
    """
    Rebuilds entity properties from ``RetrieveMetadataChanges`` records.

    :param context: Build context receiving the option set enums.
    :type context: ~dataverse_gen.schema.context.SchemaBuildContext
    """

    def __init__(self, context: SchemaBuildContext) -> None:
        self._context = context

    def enrich(self, entity_type: EntityType, response: Dict[str, Any]) -> None:
        """
        Replace ``entity_type.properties`` with properties built from attribute metadata.

        Also assigns ``schema_name`` and ``entity_set_name``, collapses
        polymorphic lookup navigation properties and registers option set enums.

        :param entity_type: Entity parsed from the EDMX document.
        :type entity_type: EntityType
        :param response: Metadata service response, ``{"EntityMetadata": [...]}``.
        :type response: dict[str, Any]
        :raises ConfigurationError: If the response holds no record, meaning the
            entity does not exist on the server.
        :raises MetadataError: If the response is not a JSON object.
        """
        if not isinstance(response, dict):
            raise MetadataError(
                f"Unexpected metadata response for {entity_type.name}",
                subcode=METADATA_INVALID_RESPONSE,
                details={"entity": entity_type.name},
            )
        records = response.get("EntityMetadata") or []
        if not records:
            raise ConfigurationError(
                f"{entity_type.name} is not a Dataverse entity, remove it from the {CONFIG_FILE_NAME}",
                subcode=CONFIG_ENTITY_NOT_FOUND,
                details={"entity": entity_type.name},
            )
        metadata = EntityMetadata.from_api_response(records[0])
        if not metadata.logical_name:
            logger.warning("Metadata record for %s has no LogicalName, skipping", entity_type.name)
            return

        entity_type.schema_name = metadata.schema_name
        entity_type.entity_set_name = metadata.entity_set_name
        entity_type.properties = []
        if metadata.attributes is None:
            return

        properties: List[EntityTypeProperty] = []
        for attribute in metadata.attributes:
            if attribute.attribute_type_name == ATTRIBUTE_TYPE_VIRTUAL:
                continue
            properties.append(self._build_property(entity_type, metadata, attribute))
        properties.sort(key=lambda p: p.name, reverse=True)
        entity_type.properties = properties
        logger.debug("Enriched %s with %d properties", entity_type.name, len(properties))

    def _build_property(
        self, entity_type: EntityType, metadata: EntityMetadata, attribute: AttributeMetadata
    ) -> EntityTypeProperty:
        attribute_type = attribute.attribute_type_name
        type_name = attribute_type
        date_format = ""
        option_set_enum: Optional[EnumType] = None

        if attribute_type == ATTRIBUTE_TYPE_DATETIME:
            date_format = f"{attribute.format or ''}:{attribute.date_time_behavior or ''}"
        elif attribute_type in LOOKUP_ATTRIBUTE_TYPES:
            self._collapse_lookup_navigation(entity_type, attribute)
        elif attribute_type in OPTIONSET_ATTRIBUTE_TYPES:
            if attribute.option_set is None:
                logger.warning("%s.%s has no option set metadata", entity_type.name, attribute.logical_name)
            else:
                option_set_enum = self.add_enum(attribute.option_set, metadata.logical_name)

        if option_set_enum is not None:
            type_name = option_set_enum.name

        return EntityTypeProperty(
            name=attribute.logical_name,
            type=type_name or "",
            schema_name=attribute.schema_name,
            is_required=attribute.required_level == REQUIRED_LEVEL_APPLICATION_REQUIRED,
            is_enum=option_set_enum is not None,
            is_multi_select=attribute_type == ATTRIBUTE_TYPE_MULTISELECT_PICKLIST,
            format=date_format,
            display_name=attribute.display_name or "",
            description=attribute.description or "",
            attribute_of=attribute.attribute_of,
            source_type=attribute.source_type,
        )

    @staticmethod
    def _collapse_lookup_navigation(entity_type: EntityType, attribute: AttributeMetadata) -> None:
        """
        Group the navigation properties of a polymorphic lookup.

        Dataverse declares one navigation property per target
        (``parentcustomerid_account``, ``parentcustomerid_contact``). They are
        replaced by a single entry whose type lists every target.
        """
        if not attribute.targets:
            return
        prefix = attribute.logical_name + "_"
        related = [n for n in entity_type.navigation_properties if n.name.startswith(prefix)]
        if not related:
            return
        grouped = related[0]
        grouped.type = ",".join(attribute.targets)
        grouped.full_name = attribute.logical_name
        grouped.name = last_segment(grouped.full_name)
        entity_type.navigation_properties = [
            n for n in entity_type.navigation_properties if not any(n is r for r in related)
        ]
        entity_type.navigation_properties.append(grouped)

    def add_enum(self, option_set: OptionSetMetadata, entity_logical_name: str) -> EnumType:
        """
        Build an enum from option set metadata and register it.

        Entity-scoped option sets are named ``<entity>_<option set>``. Global
        option sets keep their name and the first registration wins.

        :return: The enum the attribute should reference.
        :rtype: EnumType
        """
        members = []
        for option in option_set.options:
            name = make_code_safe(option.label) if option.label else ""
            if not name:
                name = f"_{option.value}"
            members.append(EnumMember(name=name, value=str(option.value)))
        members.sort(key=lambda m: int(m.value))

        name = option_set.name if option_set.is_global else f"{entity_logical_name}_{option_set.name}"
        return self._context.register_enum(EnumType(name=name, members=members, is_global=option_set.is_global))


__all__ = ["MetadataEnricher", "make_code_safe"]
