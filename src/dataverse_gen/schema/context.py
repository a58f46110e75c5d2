# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Per-build state shared by the schema passes."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..models.edmx import EnumType

logger = logging.getLogger(__name__)


class SchemaBuildContext:
    """
    State owned by one :class:`~dataverse_gen.schema.model.SchemaModel` build.

    Global option sets are interned here by name so that the same option set
    referenced from several tables produces a single enum. Every model creates
    its own context, so independent builds never share option sets.

    :ivar enum_types: Enums registered during enrichment, in registration order.
    :vartype enum_types: list[EnumType]
    """

    def __init__(self) -> None:
        self.enum_types: List[EnumType] = []
        self._global_option_sets: Dict[str, EnumType] = {}

    def register_enum(self, enum_type: EnumType) -> EnumType:
        """
        Register an option set enum.

        Entity-scoped enums are always added. A global enum is added the first
        time its name is seen; later registrations return the first enum and
        are discarded.

        :param enum_type: The enum built from option set metadata.
        :type enum_type: EnumType
        :return: The enum that represents the option set in the model.
        :rtype: EnumType
        """
        if enum_type.is_global:
            existing = self._global_option_sets.get(enum_type.name)
            if existing is not None:
                logger.debug("Global option set %s already registered", enum_type.name)
                return existing
            self._global_option_sets[enum_type.name] = enum_type
        self.enum_types.append(enum_type)
        return enum_type

    def global_option_set(self, name: str) -> Optional[EnumType]:
        return self._global_option_sets.get(name)


__all__ = ["SchemaBuildContext"]
