# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Persistence of generated files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from ..core._error_codes import CONFIG_FIELD_MISSING
from ..core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class CodeWriter(Protocol):
    def create_sub_folder(self, name: str) -> None:
        """Create ``name`` below the output root if it does not exist."""
        ...

    def write(self, path: str, text: str) -> None:
        """Write ``text`` to ``path``, relative to the output root."""
        ...


class FileSystemCodeWriter:
    """
    Writes generated files below ``<project_dir>/<output_root>``.

    :param output_root: Output directory, relative to ``project_dir``.
    :type output_root: str or None
    :param project_dir: Project directory. Defaults to the working directory.
    :type project_dir: str or ~pathlib.Path or None
    :raises ConfigurationError: If ``output_root`` is empty.
    """

    def __init__(self, output_root: Optional[str], project_dir: Union[str, Path, None] = None) -> None:
        if not output_root:
            raise ConfigurationError(
                "output.outputRoot is required",
                subcode=CONFIG_FIELD_MISSING,
                details={"field": "output.outputRoot"},
            )
        base = Path(project_dir) if project_dir is not None else Path.cwd()
        self.root_path = base / output_root
        self.root_path.mkdir(parents=True, exist_ok=True)

    def create_sub_folder(self, name: str) -> None:
        (self.root_path / name).mkdir(parents=True, exist_ok=True)

    def write(self, path: str, text: str) -> None:
        out_path = self.root_path / path
        out_path.write_text(text, encoding="utf-8")
        logger.debug("Wrote %s", out_path)


__all__ = ["CodeWriter", "FileSystemCodeWriter"]
