# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for the metadata API models and type descriptors."""

import unittest

from dataverse_gen.models.entity_metadata import AttributeMetadata, EntityMetadata, OptionSetMetadata
from dataverse_gen.models.type_descriptor import OutputType, StructuralCategory, TypeDescriptor


class TestAttributeMetadata(unittest.TestCase):
    def test_from_api_response(self):
        attribute = AttributeMetadata.from_api_response(
            {
                "LogicalName": "createdon",
                "SchemaName": "CreatedOn",
                "AttributeTypeName": {"Value": "DateTimeType"},
                "RequiredLevel": {"Value": "None", "CanBeChanged": False},
                "DisplayName": {"UserLocalizedLabel": {"Label": "Created On"}},
                "Description": {"UserLocalizedLabel": None},
                "Format": "DateAndTime",
                "DateTimeBehavior": {"Value": "UserLocal"},
                "SourceType": 0,
            }
        )
        self.assertEqual(attribute.logical_name, "createdon")
        self.assertEqual(attribute.attribute_type_name, "DateTimeType")
        self.assertEqual(attribute.required_level, "None")
        self.assertEqual(attribute.display_name, "Created On")
        self.assertIsNone(attribute.description)
        self.assertEqual(attribute.format, "DateAndTime")
        self.assertEqual(attribute.date_time_behavior, "UserLocal")
        self.assertEqual(attribute.source_type, 0)
        self.assertEqual(attribute.targets, [])
        self.assertIsNone(attribute.option_set)

    def test_option_set(self):
        attribute = AttributeMetadata.from_api_response(
            {
                "LogicalName": "industrycode",
                "OptionSet": {
                    "Name": "industry",
                    "IsGlobal": True,
                    "Options": [{"Value": 1, "Label": {"UserLocalizedLabel": {"Label": "Accounting"}}}],
                },
            }
        )
        self.assertEqual(attribute.option_set.name, "industry")
        self.assertTrue(attribute.option_set.is_global)
        self.assertEqual(attribute.option_set.options[0].value, 1)
        self.assertEqual(attribute.option_set.options[0].label, "Accounting")

    def test_option_set_defaults(self):
        option_set = OptionSetMetadata.from_api_response({"Name": "x", "Options": None})
        self.assertFalse(option_set.is_global)
        self.assertEqual(option_set.options, [])


class TestEntityMetadata(unittest.TestCase):
    def test_from_api_response(self):
        metadata = EntityMetadata.from_api_response(
            {
                "LogicalName": "account",
                "SchemaName": "Account",
                "EntitySetName": "accounts",
                "Attributes": [{"LogicalName": "name", "Targets": None}],
            }
        )
        self.assertEqual(metadata.schema_name, "Account")
        self.assertEqual(metadata.entity_set_name, "accounts")
        self.assertEqual([a.logical_name for a in metadata.attributes], ["name"])

    def test_missing_attributes(self):
        self.assertIsNone(EntityMetadata.from_api_response({"LogicalName": "account"}).attributes)


class TestTypeDescriptor(unittest.TestCase):
    def test_base_name_and_to_dict(self):
        descriptor = TypeDescriptor("Contact[]", OutputType.ENTITY, "../entities/Contact", is_collection=True)
        self.assertEqual(descriptor.base_name, "Contact")
        self.assertEqual(
            descriptor.to_dict(),
            {
                "name": "Contact[]",
                "outputType": "entityType",
                "importLocation": "../entities/Contact",
                "isCollection": True,
                "fieldKind": None,
            },
        )

    def test_structural_type_names(self):
        self.assertEqual(StructuralCategory.COMPLEX_TYPE.type_name, "EntityType")
        self.assertEqual(StructuralCategory.COLLECTION.type_name, "Collection")
        self.assertEqual(StructuralCategory.UNKNOWN.type_name, "Unknown")
