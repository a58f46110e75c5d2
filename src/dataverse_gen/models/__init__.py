# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data models for the generator.

- :mod:`~dataverse_gen.models.edmx`: schema graph nodes read from the EDMX document.
- :mod:`~dataverse_gen.models.type_descriptor`: resolved semantic types.
- :mod:`~dataverse_gen.models.entity_metadata`: table and attribute metadata from the metadata API.

Note:
    This ``__init__.py`` does NOT import/export models. Import directly from
    the specific module files.
"""

__all__ = []
