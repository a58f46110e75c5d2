# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Constants for Dataverse EDMX and attribute metadata.

These constants define the platform identifiers the schema pipeline reads from
the EDMX document and from the ``RetrieveMetadataChanges`` response.
"""

# EDMX / CSDL namespaces accepted by the parser
EDMX_NAMESPACES = (
    "http://docs.oasis-open.org/odata/ns/edmx",
    "http://schemas.microsoft.com/ado/2007/06/edmx",
)
EDM_NAMESPACES = (
    "http://docs.oasis-open.org/odata/ns/edm",
    "http://schemas.microsoft.com/ado/2009/11/edm",
    "http://schemas.microsoft.com/ado/2008/09/edm",
)

# Full namespace and alias used by Dataverse for its types
DATAVERSE_NAMESPACE = "Microsoft.Dynamics.CRM"
DATAVERSE_ALIAS = "mscrm"
EDM_PREFIX = "Edm"

COLLECTION_PREFIX = "Collection("

# Platform entities that are never generated
SYSTEM_ENTITIES = frozenset({"crmbaseentity", "principal", "crmmodelbaseentity", "expando"})

# Catch-all base entity used for polymorphic parameters and navigation targets
BASE_ENTITY_NAME = "crmbaseentity"

# Name of the binding parameter of collection-bound actions and functions
ENTITYSET_PARAMETER_NAME = "entityset"

# AttributeTypeName values
ATTRIBUTE_TYPE_VIRTUAL = "VirtualType"
ATTRIBUTE_TYPE_DATETIME = "DateTimeType"
ATTRIBUTE_TYPE_CUSTOMER = "CustomerType"
ATTRIBUTE_TYPE_LOOKUP = "LookupType"
ATTRIBUTE_TYPE_PICKLIST = "PicklistType"
ATTRIBUTE_TYPE_MULTISELECT_PICKLIST = "MultiSelectPicklistType"
ATTRIBUTE_TYPE_STATUS = "StatusType"
ATTRIBUTE_TYPE_STATE = "StateType"

LOOKUP_ATTRIBUTE_TYPES = frozenset({ATTRIBUTE_TYPE_CUSTOMER, ATTRIBUTE_TYPE_LOOKUP})
OPTIONSET_ATTRIBUTE_TYPES = frozenset(
    {
        ATTRIBUTE_TYPE_PICKLIST,
        ATTRIBUTE_TYPE_MULTISELECT_PICKLIST,
        ATTRIBUTE_TYPE_STATUS,
        ATTRIBUTE_TYPE_STATE,
    }
)

# RequiredLevel value that marks an attribute as required
REQUIRED_LEVEL_APPLICATION_REQUIRED = "ApplicationRequired"

# Keys of the referencedTypes configuration that hold per-category import prefixes
REFERENCED_TYPES_ENUMS = "enums"
REFERENCED_TYPES_COMPLEX_TYPES = "complexTypes"
REFERENCED_TYPES_ENTITY_TYPES = "entityTypes"

# Client library type used for entity-valued parameters and lookups
ENTITY_REFERENCE_TYPE = "EntityReference"

# Default configuration file name in the project directory
CONFIG_FILE_NAME = ".dataverse-gen.json"
EDMX_CACHE_FILE_NAME = "cds-edmx.xml"
