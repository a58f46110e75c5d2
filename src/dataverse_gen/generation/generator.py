# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
TypeScript code generation from a generated :class:`~dataverse_gen.schema.model.SchemaModel`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..core.config import GeneratorConfig
from ..schema.model import SchemaModel
from .code_writer import CodeWriter
from .templates import TemplateProvider

logger = logging.getLogger(__name__)


class TypeScriptGenerator:
    """
    Renders every type of a schema model and hands the text to a code writer.

    Files are written as ``<folder>/<name><suffix>``:

    - ``entities/<SchemaName>`` per entity
    - ``enums/<Name>`` per enum
    - ``actions/<Name>`` and ``functions/<Name>`` per operation
    - ``complextypes/<Name>`` per complex type
    - ``metadata`` and, when ``generate_index`` is set, ``index`` at the root

    :param model: A model on which :meth:`SchemaModel.generate` has completed.
    :type model: ~dataverse_gen.schema.model.SchemaModel
    :param code_writer: Destination of the rendered files.
    :type code_writer: ~dataverse_gen.generation.code_writer.CodeWriter
    :param template_provider: Renders the named templates.
    :type template_provider: ~dataverse_gen.generation.templates.TemplateProvider
    :param config: Generator options. Defaults to the model's options.
    :type config: ~dataverse_gen.core.config.GeneratorConfig or None
    """

    def __init__(
        self,
        model: SchemaModel,
        code_writer: CodeWriter,
        template_provider: TemplateProvider,
        config: Optional[GeneratorConfig] = None,
    ) -> None:
        self.model = model
        self.code_writer = code_writer
        self.template_provider = template_provider
        self.config = config or model.config

    def generate(self) -> List[str]:
        """
        Write every file.

        :return: Paths written, relative to the output root.
        :rtype: list[str]
        """
        written: List[str] = []
        written += self._output_files("entity", "entities", self.model.entity_types, lambda e: e.schema_name or e.name)
        written += self._output_files("enum", "enums", self.model.enum_types, _name)
        written += self._output_files("action", "actions", self.model.actions, _name)
        written += self._output_files("function", "functions", self.model.functions, _name)
        written += self._output_files("complextype", "complextypes", self.model.complex_types, _name)
        written.append(self._output_root_file("metadata"))
        if self.config.generate_index:
            written.append(self._output_root_file("index"))
        return written

    def _output_files(
        self,
        template_name: str,
        folder: str,
        items: Iterable[Any],
        file_name: Callable[[Any], str],
    ) -> List[str]:
        self.code_writer.create_sub_folder(folder)
        written = []
        for item in items:
            out_file = f"{folder}/{file_name(item)}{self.config.output.file_suffix}"
            logger.info("Generating: %s", out_file)
            text = self.template_provider.render(template_name, self._context(item=item))
            self.code_writer.write(out_file, text)
            written.append(out_file)
        return written

    def _output_root_file(self, template_name: str) -> str:
        out_file = f"{template_name}{self.config.output.file_suffix}"
        logger.info("Generating: %s", out_file)
        self.code_writer.write(out_file, self.template_provider.render(template_name, self._context(model=self.model)))
        return out_file

    def _context(self, **values: Any) -> Dict[str, Any]:
        context: Dict[str, Any] = {"config": self.config}
        context.update(values)
        return context


def _name(item: Any) -> str:
    return item.name


__all__ = ["TypeScriptGenerator"]
