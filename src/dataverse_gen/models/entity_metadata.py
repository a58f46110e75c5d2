# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Table and attribute metadata read from the metadata API.

The ``RetrieveMetadataChanges`` response is consumed, never produced, by the
generator. These classes give the enricher typed access to the parts of a
``ComplexEntityMetadata`` record it needs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _label_text(label_obj: Any) -> Optional[str]:
    """Return ``UserLocalizedLabel.Label`` from a ``Label`` payload, or a plain string as is."""
    if isinstance(label_obj, dict):
        localized = label_obj.get("UserLocalizedLabel")
        if isinstance(localized, dict):
            return localized.get("Label")
        return None
    return label_obj if label_obj else None


def _managed_value(value_obj: Any) -> Optional[Any]:
    """Unwrap ``{"Value": ...}`` managed properties; plain values pass through."""
    if isinstance(value_obj, dict):
        return value_obj.get("Value")
    return value_obj


@dataclass
class OptionMetadata:
    """
    A single option of an option set.

    :param value: Integer value of the option.
    :type value: int
    :param label: User localized label, if any.
    :type label: str or None
    """

    value: int
    label: Optional[str] = None

    @classmethod
    def from_api_response(cls, response_data: Dict[str, Any]) -> "OptionMetadata":
        return cls(value=int(response_data["Value"]), label=_label_text(response_data.get("Label")))


@dataclass
class OptionSetMetadata:
    """
    An option set attached to a picklist, multi-select, status or state attribute.

    :param name: Option set name.
    :type name: str
    :param is_global: Whether the option set is shared between tables.
    :type is_global: bool
    :param options: Options in the order returned by the service.
    :type options: list[OptionMetadata]
    """

    name: str
    is_global: bool = False
    options: List[OptionMetadata] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, response_data: Dict[str, Any]) -> "OptionSetMetadata":
        return cls(
            name=response_data.get("Name", ""),
            is_global=response_data.get("IsGlobal") is True,
            options=[OptionMetadata.from_api_response(o) for o in response_data.get("Options") or []],
        )


@dataclass
class AttributeMetadata:
    """
    Column metadata.

    :param logical_name: Column logical name.
    :type logical_name: str
    :param attribute_type_name: ``AttributeTypeName.Value`` (e.g. ``StringType``, ``LookupType``).
    :type attribute_type_name: str or None
    :param required_level: ``RequiredLevel.Value`` (``None``, ``Recommended``, ``ApplicationRequired``, ...).
    :type required_level: str or None
    :param targets: Target table logical names for lookup columns.
    :type targets: list[str]
    :param option_set: Option set of picklist-like columns.
    :type option_set: OptionSetMetadata or None
    :param format: Date format of date columns.
    :type format: str or None
    :param date_time_behavior: ``DateTimeBehavior.Value`` of date columns.
    :type date_time_behavior: str or None
    """

    logical_name: str
    schema_name: Optional[str] = None
    attribute_type_name: Optional[str] = None
    required_level: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    attribute_of: Optional[str] = None
    source_type: Optional[int] = None
    targets: List[str] = field(default_factory=list)
    option_set: Optional[OptionSetMetadata] = None
    format: Optional[str] = None
    date_time_behavior: Optional[str] = None

    @classmethod
    def from_api_response(cls, response_data: Dict[str, Any]) -> "AttributeMetadata":
        """
        Create an AttributeMetadata from an entry of ``EntityMetadata[].Attributes``.

        :param response_data: Raw API response dictionary.
        :type response_data: dict[str, Any]
        :return: AttributeMetadata instance.
        :rtype: AttributeMetadata
        """
        option_set = response_data.get("OptionSet")
        fmt = response_data.get("Format")
        return cls(
            logical_name=response_data.get("LogicalName", ""),
            schema_name=response_data.get("SchemaName"),
            attribute_type_name=_managed_value(response_data.get("AttributeTypeName")),
            required_level=_managed_value(response_data.get("RequiredLevel")),
            display_name=_label_text(response_data.get("DisplayName")),
            description=_label_text(response_data.get("Description")),
            attribute_of=response_data.get("AttributeOf"),
            source_type=response_data.get("SourceType"),
            targets=list(response_data.get("Targets") or []),
            option_set=OptionSetMetadata.from_api_response(option_set) if isinstance(option_set, dict) else None,
            format=str(fmt) if fmt is not None else None,
            date_time_behavior=_managed_value(response_data.get("DateTimeBehavior")),
        )


@dataclass
class EntityMetadata:
    """
    Table metadata.

    :param logical_name: Table logical name.
    :type logical_name: str or None
    :param schema_name: Table schema name, used as the generated type name.
    :type schema_name: str or None
    :param entity_set_name: Web API entity set name.
    :type entity_set_name: str or None
    :param attributes: Column metadata, or None when the response omits ``Attributes``.
    :type attributes: list[AttributeMetadata] or None
    """

    logical_name: Optional[str] = None
    schema_name: Optional[str] = None
    entity_set_name: Optional[str] = None
    attributes: Optional[List[AttributeMetadata]] = None

    @classmethod
    def from_api_response(cls, response_data: Dict[str, Any]) -> "EntityMetadata":
        attributes = response_data.get("Attributes")
        return cls(
            logical_name=response_data.get("LogicalName"),
            schema_name=response_data.get("SchemaName"),
            entity_set_name=response_data.get("EntitySetName"),
            attributes=[AttributeMetadata.from_api_response(a) for a in attributes] if attributes is not None else None,
        )


__all__ = ["AttributeMetadata", "EntityMetadata", "OptionMetadata", "OptionSetMetadata"]
