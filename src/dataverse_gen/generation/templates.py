# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Template rendering.

A :class:`TemplateProvider` turns a named template and a context mapping into
text. :class:`TypeScriptTemplateProvider` renders TypeScript declarations for
the ``dataverse-ify`` client library straight from the resolved schema graph.

Every template receives ``config`` (the generator options). Per-item
templates (``entity``, ``enum``, ``complextype``, ``action``, ``function``)
also receive ``item``; ``metadata`` and ``index`` receive ``model``.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from ..common.constants import ATTRIBUTE_TYPE_DATETIME, DATAVERSE_ALIAS
from ..core.config import GeneratorConfig
from ..models.edmx import ComplexType, EntityType, EntityTypeProperty, EnumType, FunctionType
from ..models.type_descriptor import OutputType, TypeDescriptor
from ..schema._names import last_segment

_HEADER = "/* eslint-disable*/"
_INDENT = "  "


class TemplateProvider(Protocol):
    def render(self, template_name: str, context: Mapping[str, Any]) -> str:
        """Render ``template_name`` with ``context``."""
        ...


def render_type(descriptor: Optional[TypeDescriptor]) -> str:
    """
    Return the TypeScript spelling of a descriptor.

    Types with an import location are written as inline ``import("...")``
    types. Unknown types become ``any``.
    """
    if descriptor is None or descriptor.output_type is OutputType.UNKNOWN:
        return "any[]" if descriptor is not None and descriptor.is_collection else "any"
    suffix = "[]" if descriptor.name.endswith("[]") else ""
    if descriptor.import_location:
        return f'import("{descriptor.import_location}").{descriptor.base_name}{suffix}'
    return descriptor.name


def render_union(descriptors: Sequence[TypeDescriptor]) -> str:
    if not descriptors:
        return "any"
    return " | ".join(render_type(d) for d in descriptors)


def _comment(lines: List[str], text: str, indent: str = _INDENT) -> None:
    """Append ``text`` as a line comment, or a block comment when it spans several lines."""
    text = text.strip()
    if not text:
        return
    if "\n" in text:
        lines.append(f"{indent}/*")
        lines.extend(f"{indent}{line.rstrip()}" for line in text.splitlines())
        lines.append(f"{indent}*/")
    else:
        lines.append(f"{indent}// {text}")


def _property_comment(prop: EntityTypeProperty) -> str:
    parts = [p for p in (prop.display_name, prop.description) if p]
    text = " ".join(parts)
    if prop.type == ATTRIBUTE_TYPE_DATETIME and prop.format:
        text = f"{text} {prop.format}".strip()
    return text


def _identifier(name: str) -> str:
    return name if name.isidentifier() else f'"{name}"'


class TypeScriptTemplateProvider:
    """Built-in TypeScript templates."""

    def __init__(self) -> None:
        self._templates: Dict[str, Callable[[Mapping[str, Any]], str]] = {
            "entity": self._entity,
            "enum": self._enum,
            "complextype": self._complex_type,
            "action": self._action,
            "function": self._function,
            "metadata": self._metadata,
            "index": self._index,
        }

    @property
    def template_names(self) -> List[str]:
        return list(self._templates)

    def render(self, template_name: str, context: Mapping[str, Any]) -> str:
        """
        Render a built-in template.

        :param template_name: One of :attr:`template_names`.
        :type template_name: str
        :param context: Template context.
        :type context: Mapping[str, Any]
        :return: Rendered file content.
        :rtype: str
        :raises KeyError: If the template does not exist.
        """
        try:
            template = self._templates[template_name]
        except KeyError:
            raise KeyError(f"Unknown template '{template_name}'") from None
        return template(context)

    # ---------------------------------------------------------------- entity

    def _entity(self, context: Mapping[str, Any]) -> str:
        entity: EntityType = context["item"]
        config: GeneratorConfig = context["config"]
        type_name = entity.schema_name or entity.name
        lines = [_HEADER, 'import { IEntity } from "dataverse-ify";', f"// Entity {type_name}"]

        lines.append(f"export const {entity.name}Metadata = {{")
        lines.append(f'{_INDENT}typeName: "{DATAVERSE_ALIAS}.{entity.name}",')
        lines.append(f'{_INDENT}logicalName: "{entity.name}",')
        lines.append(f'{_INDENT}collectionName: "{entity.entity_set_name or ""}",')
        lines.append(f'{_INDENT}primaryIdAttribute: "{entity.key_name or ""}",')
        lines.append(f"{_INDENT}attributeTypes: {{")
        for prop in sorted(entity.properties, key=lambda p: p.name):
            attribute_type = prop.type
            if prop.is_enum:
                attribute_type = "MultiSelectPicklistType" if prop.is_multi_select else "EnumType"
            lines.append(f'{_INDENT * 2}{prop.name}: "{attribute_type}",')
        lines.append(f"{_INDENT}}},")
        lines.append(f"{_INDENT}navigation: {{")
        for nav in entity.navigation_properties:
            targets = ",".join(f'"{DATAVERSE_ALIAS}.{last_segment(t)}"' for t in nav.type.split(",") if t)
            lines.append(f"{_INDENT * 2}{_identifier(nav.name)}: [{targets}],")
        lines.append(f"{_INDENT}}},")
        lines.append("};")
        lines.append("")

        lines.append("// Attribute constants")
        lines.append(f"export const enum {type_name}Attributes {{")
        for prop in entity.properties:
            lines.append(f'{_INDENT}{prop.schema_name or prop.name} = "{prop.name}",')
        lines.append("}")
        lines.append("")

        lines.append("// Early Bound Interface")
        lines.append(f"export interface {type_name} extends IEntity {{")
        for prop in entity.properties:
            _comment(lines, _property_comment(prop))
            lines.append(f"{_INDENT}{_identifier(prop.name)}?: {render_type(prop.type_descriptor)} | null;")
        lines.append("}")

        if config.generate_form_context:
            lines.append("")
            lines.extend(self._form_context(type_name, entity))
        return "\n".join(lines) + "\n"

    @staticmethod
    def _form_context(type_name: str, entity: EntityType) -> List[str]:
        lines = [
            "// Form Context",
            f"export interface {type_name}FormContext extends Xrm.FormContext {{",
        ]
        for prop in entity.properties:
            descriptor = prop.type_descriptor
            kind = "OptionSet" if prop.is_enum else (descriptor.field_kind if descriptor else None)
            attribute = f"Xrm.Attributes.{kind}Attribute" if kind else "Xrm.Attributes.Attribute"
            lines.append(f'{_INDENT}getAttribute(name: "{prop.name}"): {attribute};')
        for prop in entity.properties:
            descriptor = prop.type_descriptor
            if prop.is_enum or prop.type == "BooleanType":
                control = "Xrm.Controls.OptionSetControl"
            elif descriptor is not None and descriptor.field_kind:
                control = f"Xrm.Controls.{descriptor.field_kind}Control"
            else:
                control = "Xrm.Controls.StandardControl"
            lines.append(f'{_INDENT}getControl(name: "{prop.name}"): {control};')
        lines.append("}")
        return lines

    # ------------------------------------------------------------------ enum

    def _enum(self, context: Mapping[str, Any]) -> str:
        enum_type: EnumType = context["item"]
        lines = [_HEADER, f"export const enum {enum_type.name} {{"]
        for member in enum_type.members:
            lines.append(f"{_INDENT}{_identifier(member.name)} = {member.value},")
        lines.append("}")
        return "\n".join(lines) + "\n"

    # ----------------------------------------------------------- complextype

    def _complex_type(self, context: Mapping[str, Any]) -> str:
        complex_type: ComplexType = context["item"]
        lines = [_HEADER, f"export interface {complex_type.name} {{"]
        for prop in complex_type.properties:
            lines.append(f"{_INDENT}{_identifier(prop.name)}?: {render_type(prop.type_descriptor)};")
        for nav in complex_type.navigation_properties:
            lines.append(f"{_INDENT}{_identifier(nav.name)}?: {render_type(nav.type_descriptor)};")
        lines.append("}")
        return "\n".join(lines) + "\n"

    # ------------------------------------------------------ action/function

    def _action(self, context: Mapping[str, Any]) -> str:
        return self._operation(context["item"], "Action", 0)

    def _function(self, context: Mapping[str, Any]) -> str:
        return self._operation(context["item"], "Function", 1)

    @staticmethod
    def _operation(operation: FunctionType, kind: str, operation_type: int) -> str:
        lines = [
            _HEADER,
            'import { WebApiExecuteRequest } from "dataverse-ify";',
            'import { StructuralProperty } from "dataverse-ify";',
            'import { OperationType } from "dataverse-ify";',
            "",
            f"// {kind} {operation.name}",
            f"export const {operation.name}Metadata = {{",
        ]
        if operation.is_bound and operation.binding_parameter:
            lines.append(f'{_INDENT}boundParameter: "{operation.binding_parameter}",')
        else:
            lines.append(f"{_INDENT}boundParameter: undefined,")
        lines.append(f"{_INDENT}parameterTypes: {{")
        for parameter in operation.parameters:
            lines.append(f'{_INDENT * 2}"{parameter.name}": {{')
            lines.append(f'{_INDENT * 3}typeName: "{parameter.type}",')
            lines.append(
                f"{_INDENT * 3}structuralProperty: StructuralProperty.{parameter.structural_type_name or 'Unknown'},"
            )
            lines.append(f"{_INDENT * 2}}},")
        lines.append(f"{_INDENT}}},")
        lines.append(f"{_INDENT}operationType: OperationType.{kind}, // {operation_type}")
        lines.append(f'{_INDENT}operationName: "{operation.name}",')
        lines.append("};")
        lines.append("")

        lines.append(f"export interface {operation.name}Request extends WebApiExecuteRequest {{")
        for parameter in operation.parameters:
            optional = "?" if parameter.nullable else ""
            lines.append(
                f"{_INDENT}{_identifier(parameter.name)}{optional}: {render_union(parameter.type_descriptors)};"
            )
        lines.append("}")

        if operation.return_type_descriptor is not None:
            lines.append("")
            lines.append(f"// Returns {operation.return_type}{'[]' if operation.returns_collection else ''}")
            lines.append(f"export type {operation.name}Response = {render_type(operation.return_type_descriptor)};")
        return "\n".join(lines) + "\n"

    # -------------------------------------------------------- metadata/index

    def _metadata(self, context: Mapping[str, Any]) -> str:
        model = context["model"]
        lines = [_HEADER]
        for entity in model.entity_types:
            lines.append(
                f'import {{ {entity.name}Metadata }} from "./entities/{entity.schema_name or entity.name}";'
            )
        for action in model.actions:
            lines.append(f'import {{ {action.name}Metadata }} from "./actions/{action.name}";')
        for function in model.functions:
            lines.append(f'import {{ {function.name}Metadata }} from "./functions/{function.name}";')
        lines.append("")

        lines.append("export const Entities = {")
        for entity in model.entity_types:
            lines.append(f'{_INDENT}{entity.schema_name or entity.name}: "{entity.name}",')
        lines.append("};")
        lines.append("")

        lines.append("// Setup Metadata")
        lines.append("// Usage: setMetadataCache(metadataCache);")
        lines.append("export const metadataCache = {")
        lines.append(f"{_INDENT}entities: {{")
        for entity in model.entity_types:
            lines.append(f"{_INDENT * 2}{entity.name}: {entity.name}Metadata,")
        lines.append(f"{_INDENT}}},")
        lines.append(f"{_INDENT}actions: {{")
        for operation in list(model.actions) + list(model.functions):
            lines.append(f"{_INDENT * 2}{operation.name}: {operation.name}Metadata,")
        lines.append(f"{_INDENT}}},")
        lines.append("};")
        return "\n".join(lines) + "\n"

    def _index(self, context: Mapping[str, Any]) -> str:
        model = context["model"]
        lines = [_HEADER]
        for entity in model.entity_types:
            lines.append(f'export * from "./entities/{entity.schema_name or entity.name}";')
        for enum_type in model.enum_types:
            lines.append(f'export * from "./enums/{enum_type.name}";')
        for complex_type in model.complex_types:
            lines.append(f'export * from "./complextypes/{complex_type.name}";')
        for action in model.actions:
            lines.append(f'export * from "./actions/{action.name}";')
        for function in model.functions:
            lines.append(f'export * from "./functions/{function.name}";')
        lines.append('export * from "./metadata";')
        return "\n".join(lines) + "\n"


__all__ = ["TemplateProvider", "TypeScriptTemplateProvider", "render_type", "render_union"]
