# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Configuration for the generator and for the metadata service.

:class:`GeneratorConfig` mirrors the ``.dataverse-gen.json`` project file. User
options are deep-merged over :data:`DEFAULT_OPTIONS` before they are turned
into dataclasses, so a project file only needs the keys it changes.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from ..common.constants import (
    CONFIG_FILE_NAME,
    REFERENCED_TYPES_COMPLEX_TYPES,
    REFERENCED_TYPES_ENTITY_TYPES,
    REFERENCED_TYPES_ENUMS,
)
from ._error_codes import CONFIG_FIELD_MISSING, CONFIG_INVALID_JSON
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS: Dict[str, Any] = {
    "entities": [],
    "actions": [],
    "functions": [],
    "referencedTypes": {
        "Object": {"name": "ObjectValue"},
        "Guid": {"name": "Guid", "import": "dataverse-ify"},
        "Entity": {"name": "IEntity", "import": "dataverse-ify"},
        "EntityReference": {"name": "EntityReference", "import": "dataverse-ify"},
        "WebApiExecuteRequest": {"name": "WebApiExecuteRequest", "import": "dataverse-ify"},
        "StructuralProperty": {"name": "StructuralProperty", "import": "dataverse-ify"},
        "OperationType": {"name": "OperationType", "import": "dataverse-ify"},
        "ActivityParty": {"name": "ActivityParty", "import": "dataverse-ify"},
        REFERENCED_TYPES_ENUMS: {"import": "../enums/"},
        REFERENCED_TYPES_COMPLEX_TYPES: {"import": "../complextypes/"},
        REFERENCED_TYPES_ENTITY_TYPES: {"import": "../entities/"},
    },
    "generateIndex": False,
    "generateFormContext": False,
    "output": {
        "useCache": False,
        "outputRoot": "./src/dataverse-gen",
        "templateRoot": "./_templates",
        "fileSuffix": ".ts",
    },
}


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge ``override`` into a copy of ``base``.

    Nested mappings are merged key by key; any other value in ``override``
    replaces the value in ``base``.
    """
    result = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


@dataclass(frozen=True)
class ImportType:
    """
    A ``referencedTypes`` entry.

    :param name: Replacement type name (e.g. ``"ObjectValue"`` for ``Object``).
    :type name: str or None
    :param import_: Module the type is imported from, or the import prefix for
        the ``enums``/``complexTypes``/``entityTypes`` category keys.
    :type import_: str or None
    """

    name: Optional[str] = None
    import_: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ImportType":
        return cls(name=data.get("name"), import_=data.get("import"))

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.name is not None:
            result["name"] = self.name
        if self.import_ is not None:
            result["import"] = self.import_
        return result


@dataclass(frozen=True)
class OutputConfig:
    """
    The ``output`` section of the project file.

    :param output_root: Folder generated files are written to, relative to the project.
    :type output_root: str or None
    :param template_root: Read and written so existing project files keep
        loading and saving unchanged. The built-in templates do not use it.
    :type template_root: str or None
    :param file_suffix: Suffix appended to every generated file name.
    :type file_suffix: str
    :param use_cache: Reuse a cached EDMX document instead of downloading it.
    :type use_cache: bool
    """

    output_root: Optional[str] = "./src/dataverse-gen"
    template_root: Optional[str] = "./_templates"
    file_suffix: str = ".ts"
    use_cache: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OutputConfig":
        return cls(
            output_root=data.get("outputRoot"),
            template_root=data.get("templateRoot"),
            file_suffix=data.get("fileSuffix") or ".ts",
            use_cache=bool(data.get("useCache", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "useCache": self.use_cache,
            "outputRoot": self.output_root,
            "templateRoot": self.template_root,
            "fileSuffix": self.file_suffix,
        }


@dataclass(frozen=True)
class GeneratorConfig:
    """
    Generator options.

    :param entities: Logical names of the tables to generate. Empty means none.
    :type entities: list[str]
    :param actions: Names of the actions to generate. Empty means none.
    :type actions: list[str]
    :param functions: Names of the functions to generate. Empty means none.
    :type functions: list[str]
    :param referenced_types: Type renames and import locations keyed by type name,
        plus the per-category import prefixes under ``enums``, ``complexTypes`` and
        ``entityTypes``.
    :type referenced_types: dict[str, ImportType]
    :param output: Output locations and caching.
    :type output: OutputConfig
    :param generate_index: Whether an ``index`` file re-exporting every generated type is written.
    :type generate_index: bool
    :param generate_form_context: Whether entity files include form context typings.
    :type generate_form_context: bool
    """

    entities: List[str] = field(default_factory=list)
    actions: List[str] = field(default_factory=list)
    functions: List[str] = field(default_factory=list)
    referenced_types: Dict[str, ImportType] = field(default_factory=dict)
    output: OutputConfig = field(default_factory=OutputConfig)
    generate_index: bool = False
    generate_form_context: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]] = None) -> "GeneratorConfig":
        """
        Build a configuration from a ``.dataverse-gen.json`` style mapping.

        The mapping is deep-merged over :data:`DEFAULT_OPTIONS` first.

        :param data: camelCase options, as stored in the project file.
        :type data: Mapping[str, Any] or None
        :return: The merged configuration.
        :rtype: GeneratorConfig
        """
        merged = deep_merge(DEFAULT_OPTIONS, data or {})
        referenced = merged.get("referencedTypes") or {}
        return cls(
            entities=list(merged.get("entities") or []),
            actions=list(merged.get("actions") or []),
            functions=list(merged.get("functions") or []),
            referenced_types={k: ImportType.from_dict(v or {}) for k, v in referenced.items()},
            output=OutputConfig.from_dict(merged.get("output") or {}),
            generate_index=bool(merged.get("generateIndex", False)),
            generate_form_context=bool(merged.get("generateFormContext", False)),
        )

    @classmethod
    def default(cls) -> "GeneratorConfig":
        return cls.from_dict({})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entities": list(self.entities),
            "actions": list(self.actions),
            "functions": list(self.functions),
            "referencedTypes": {k: v.to_dict() for k, v in self.referenced_types.items()},
            "generateIndex": self.generate_index,
            "generateFormContext": self.generate_form_context,
            "output": self.output.to_dict(),
        }

    def mapped_type_name(self, type_name: str) -> str:
        """Return the configured replacement name for ``type_name`` or the name itself."""
        mapping = self.referenced_types.get(type_name)
        if mapping is not None and mapping.name:
            return mapping.name
        return type_name

    def import_prefix(self, category: str) -> str:
        """
        Return the import prefix configured for a type category.

        :raises ConfigurationError: If the category key or its ``import`` is missing.
        """
        mapping = self.referenced_types.get(category)
        if mapping is None or mapping.import_ is None:
            raise ConfigurationError(
                f"referencedTypes.{category}.import is required to resolve import locations",
                subcode=CONFIG_FIELD_MISSING,
                details={"field": f"referencedTypes.{category}.import"},
            )
        return mapping.import_


@dataclass(frozen=True)
class ServiceConfig:
    """
    Settings for :class:`~dataverse_gen.services.metadata_service.DataverseMetadataService`.

    :param api_version: Web API version used in request URLs.
    :type api_version: str
    :param language_code: LCID for localized labels. Default is 1033 (English - United States).
    :type language_code: int
    :param http_retries: Maximum number of attempts for failed requests (default: 5).
    :type http_retries: int or None
    :param http_backoff: Base delay in seconds for exponential backoff (default: 0.5).
    :type http_backoff: float or None
    :param http_timeout: Request timeout in seconds (default: method-dependent).
    :type http_timeout: float or None
    """

    api_version: str = "9.2"
    language_code: int = 1033
    http_retries: Optional[int] = None
    http_backoff: Optional[float] = None
    http_timeout: Optional[float] = None


def load_config(path: Union[str, Path, None] = None) -> GeneratorConfig:
    """
    Load the project configuration file.

    A missing file yields the default configuration.

    :raises ConfigurationError: If the file is not valid JSON.
    """
    config_path = Path(path) if path is not None else Path.cwd() / CONFIG_FILE_NAME
    if not config_path.exists():
        logger.debug("No configuration file at %s, using defaults", config_path)
        return GeneratorConfig.default()
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as ex:
        raise ConfigurationError(
            f"{config_path} is not valid JSON: {ex}",
            subcode=CONFIG_INVALID_JSON,
            details={"path": str(config_path)},
        ) from ex
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"{config_path} must contain a JSON object",
            subcode=CONFIG_INVALID_JSON,
            details={"path": str(config_path)},
        )
    logger.debug("Loaded configuration from %s", config_path)
    return GeneratorConfig.from_dict(data)


def save_config(config: GeneratorConfig, path: Union[str, Path]) -> Path:
    config_path = Path(path)
    config_path.write_text(json.dumps(config.to_dict(), indent=2) + "\n", encoding="utf-8")
    return config_path


__all__ = [
    "DEFAULT_OPTIONS",
    "GeneratorConfig",
    "ImportType",
    "OutputConfig",
    "ServiceConfig",
    "deep_merge",
    "load_config",
    "save_config",
]
