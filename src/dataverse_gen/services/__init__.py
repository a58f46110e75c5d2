# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Collaborators that fetch metadata from a Dataverse environment.

- MetadataService: protocol the schema model depends on
- DataverseMetadataService: Web API implementation
"""

__all__ = []
