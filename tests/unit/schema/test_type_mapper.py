# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for TypeMapper."""

import pytest

from dataverse_gen.core.config import GeneratorConfig
from dataverse_gen.core.errors import ConfigurationError
from dataverse_gen.models.edmx import ComplexType, EntityType, EntityTypeProperty, EnumType, FunctionParameter
from dataverse_gen.models.type_descriptor import OutputType, StructuralCategory
from dataverse_gen.schema.type_mapper import TypeMapper


@pytest.fixture
def mapper():
    entities = [
        EntityType(name="account", schema_name="Account"),
        EntityType(name="contact", schema_name="Contact"),
    ]
    complex_types = [ComplexType(name="Label"), ComplexType(name="ObjectValue")]
    enums = [EnumType(name="account_industrycode"), EnumType(name="SingleMember")]
    return TypeMapper(GeneratorConfig.default(), entities, complex_types, enums)


class TestPropertyTypes:
    """Property path."""

    @pytest.mark.parametrize(
        "platform_type,name,field_kind",
        [
            ("StringType", "string", "String"),
            ("MemoType", "string", "String"),
            ("Edm.String", "string", "String"),
            ("IntegerType", "number", "Number"),
            ("MoneyType", "number", "Number"),
            ("Edm.Decimal", "number", "Number"),
            ("BooleanType", "boolean", "Boolean"),
            ("DateTimeType", "Date", "Date"),
            ("Edm.DateTimeOffset", "Date", "Date"),
            ("PicklistType", "number", "OptionSet"),
            ("ManagedPropertyType", "number", None),
        ],
    )
    def test_primitive_mapping(self, mapper, platform_type, name, field_kind):
        descriptor = mapper.resolve_property_type(EntityTypeProperty(name="col", type=platform_type))
        assert descriptor.name == name
        assert descriptor.output_type is OutputType.PRIMITIVE
        assert descriptor.field_kind == field_kind
        assert descriptor.import_location is None
        assert descriptor.is_collection is False

    def test_guid_imported_from_client_library(self, mapper):
        descriptor = mapper.resolve_property_type(EntityTypeProperty(name="accountid", type="UniqueidentifierType"))
        assert descriptor.name == "Guid"
        assert descriptor.import_location == "dataverse-ify"

    def test_lookup_is_entity_reference(self, mapper):
        descriptor = mapper.resolve_property_type(EntityTypeProperty(name="parentcustomerid", type="CustomerType"))
        assert descriptor.name == "EntityReference"
        assert descriptor.field_kind == "Lookup"
        assert descriptor.import_location == "dataverse-ify"

    def test_party_list(self, mapper):
        descriptor = mapper.resolve_property_type(EntityTypeProperty(name="to", type="PartyListType"))
        assert descriptor.name == "ActivityParty[]"
        assert descriptor.is_collection is True
        assert descriptor.import_location == "dataverse-ify"

    def test_enum_property(self, mapper):
        prop = EntityTypeProperty(name="industrycode", type="account_industrycode")
        descriptor = mapper.resolve_property_type(prop)
        assert descriptor.name == "account_industrycode"
        assert descriptor.output_type is OutputType.ENUM
        assert descriptor.import_location == "../enums/account_industrycode"
        assert descriptor.field_kind == "OptionSet"
        assert prop.is_enum is True

    def test_multi_select_enum_is_array(self, mapper):
        prop = EntityTypeProperty(name="new_regions", type="SingleMember", is_enum=True, is_multi_select=True)
        descriptor = mapper.resolve_property_type(prop)
        assert descriptor.name == "SingleMember[]"
        assert descriptor.is_collection is True
        assert descriptor.import_location == "../enums/SingleMember"

    def test_multi_select_without_option_set_not_double_suffixed(self, mapper):
        prop = EntityTypeProperty(name="new_regions", type="MultiSelectPicklistType", is_multi_select=True)
        descriptor = mapper.resolve_property_type(prop)
        assert descriptor.name == "number[]"
        assert descriptor.output_type is OutputType.PRIMITIVE

    def test_enum_from_schema_namespace(self, mapper):
        prop = EntityTypeProperty(name="Kind", type="mscrm.SingleMember")
        descriptor = mapper.resolve_property_type(prop)
        assert descriptor.output_type is OutputType.ENUM
        assert prop.is_enum is True

    def test_complex_collection(self, mapper):
        descriptor = mapper.resolve_property_type(EntityTypeProperty(name="Labels", type="Collection(mscrm.Label)"))
        assert descriptor.name == "Label[]"
        assert descriptor.output_type is OutputType.COMPLEX
        assert descriptor.is_collection is True
        assert descriptor.import_location == "../complextypes/Label"

    def test_renamed_complex_type(self, mapper):
        descriptor = mapper.resolve_property_type(EntityTypeProperty(name="Result", type="mscrm.Object"))
        assert descriptor.name == "ObjectValue"
        assert descriptor.output_type is OutputType.COMPLEX

    def test_entity_uses_schema_name(self, mapper):
        descriptor = mapper.resolve_type("mscrm.account")
        assert descriptor.name == "Account"
        assert descriptor.output_type is OutputType.ENTITY
        assert descriptor.import_location == "../entities/Account"

    def test_base_entity_is_unknown(self, mapper):
        descriptor = mapper.resolve_type("Collection(mscrm.crmbaseentity)")
        assert descriptor.name == "crmbaseentity[]"
        assert descriptor.output_type is OutputType.UNKNOWN
        assert descriptor.is_collection is True
        assert descriptor.import_location is None

    def test_collection_flag(self, mapper):
        descriptor = mapper.resolve_type("mscrm.contact", is_collection_type=True)
        assert descriptor.name == "Contact[]"
        assert descriptor.is_collection is True

    def test_unmatched_type_stays_primitive(self, mapper):
        descriptor = mapper.resolve_type("mscrm.somethingelse")
        assert descriptor.name == "somethingelse"
        assert descriptor.output_type is OutputType.PRIMITIVE
        assert descriptor.import_location is None


class TestParameterTypes:
    """Parameter path."""

    def test_primitive(self, mapper):
        parameter = FunctionParameter(name="Top", type="Edm.Int32")
        descriptors = mapper.resolve_parameter_type(parameter)
        assert parameter.structural_type_name == "PrimitiveType"
        assert [d.name for d in descriptors] == ["number"]

    def test_unknown_edm_type(self, mapper):
        parameter = FunctionParameter(name="Where", type="Edm.GeographyPoint")
        descriptors = mapper.resolve_parameter_type(parameter)
        assert parameter.structural_type_name == "PrimitiveType"
        assert descriptors[0].output_type is OutputType.UNKNOWN

    def test_entity_has_two_candidates(self, mapper):
        parameter = FunctionParameter(name="Target", type="mscrm.account")
        descriptors = mapper.resolve_parameter_type(parameter)
        assert parameter.structural_type_name == "EntityType"
        assert [d.name for d in descriptors] == ["EntityReference", "Account"]
        assert [d.import_location for d in descriptors] == ["dataverse-ify", "../entities/Account"]

    def test_entity_match_ignores_case(self, mapper):
        assert mapper.structural_category("mscrm.Account") is StructuralCategory.ENTITY_TYPE

    def test_entity_collection(self, mapper):
        parameter = FunctionParameter(name="Targets", type="Collection(mscrm.contact)")
        descriptors = mapper.resolve_parameter_type(parameter)
        assert parameter.structural_type_name == "Collection"
        assert [d.name for d in descriptors] == ["EntityReference[]", "Contact[]"]
        assert all(d.is_collection for d in descriptors)
        assert descriptors[0].import_location == "dataverse-ify"

    def test_entityset_binding_parameter_corrected(self, mapper):
        parameter = FunctionParameter(name="entityset", type="Collection(mscrm.account)")
        descriptors = mapper.resolve_parameter_type(parameter)
        assert parameter.type == "mscrm.account"
        assert parameter.structural_type_name == "EntityType"
        assert [d.name for d in descriptors] == ["EntityReference", "Account"]
        assert not any(d.is_collection for d in descriptors)

    def test_base_entity_parameter(self, mapper):
        parameter = FunctionParameter(name="Target", type="mscrm.crmbaseentity")
        descriptors = mapper.resolve_parameter_type(parameter)
        assert parameter.structural_type_name == "EntityType"
        assert len(descriptors) == 1
        assert descriptors[0].name == "crmbaseentity"
        assert descriptors[0].output_type is OutputType.UNKNOWN

    def test_enum(self, mapper):
        parameter = FunctionParameter(name="Kind", type="Microsoft.Dynamics.CRM.SingleMember")
        descriptors = mapper.resolve_parameter_type(parameter)
        assert parameter.structural_type_name == "EnumerationType"
        assert descriptors[0].name == "SingleMember"
        assert descriptors[0].output_type is OutputType.ENUM

    def test_complex_type_reports_entity_type(self, mapper):
        parameter = FunctionParameter(name="Payload", type="mscrm.Object")
        descriptors = mapper.resolve_parameter_type(parameter)
        assert parameter.structural_type_name == "EntityType"
        assert descriptors[0].name == "ObjectValue"
        assert descriptors[0].import_location == "../complextypes/ObjectValue"

    def test_unknown_schema_type(self, mapper):
        parameter = FunctionParameter(name="Other", type="mscrm.notinmodel")
        descriptors = mapper.resolve_parameter_type(parameter)
        assert parameter.structural_type_name == "Unknown"
        assert descriptors[0].name == "notinmodel"
        assert descriptors[0].output_type is OutputType.UNKNOWN

    def test_foreign_namespace_is_unknown(self, mapper):
        assert mapper.structural_category("Other.account") is StructuralCategory.UNKNOWN

    def test_collection_of_enums(self, mapper):
        parameter = FunctionParameter(name="Kinds", type="Collection(mscrm.SingleMember)")
        descriptors = mapper.resolve_parameter_type(parameter)
        assert parameter.structural_type_name == "Collection"
        assert descriptors[0].name == "SingleMember[]"
        assert descriptors[0].is_collection is True


class TestImportLocations:
    def test_override_wins(self):
        config = GeneratorConfig.from_dict({"referencedTypes": {"Account": {"import": "@acme/types"}}})
        mapper = TypeMapper(config, [EntityType(name="account", schema_name="Account")], [], [])
        assert mapper.resolve_import_location("Account[]", OutputType.ENTITY) == "@acme/types"

    def test_custom_prefix(self):
        config = GeneratorConfig.from_dict({"referencedTypes": {"enums": {"import": "./e/"}}})
        mapper = TypeMapper(config, [], [], [])
        assert mapper.resolve_import_location("industry", OutputType.ENUM) == "./e/industry"

    def test_primitive_has_no_import(self, mapper):
        assert mapper.resolve_import_location("string", OutputType.PRIMITIVE) is None

    def test_missing_prefix_raises(self):
        config = GeneratorConfig(referenced_types={})
        mapper = TypeMapper(config, [], [], [])
        with pytest.raises(ConfigurationError):
            mapper.resolve_import_location("industry", OutputType.ENUM)
