# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for ReferenceFilter."""

import pytest

from dataverse_gen.models.edmx import (
    ComplexType,
    EntityType,
    EntityTypeProperty,
    EnumType,
    FunctionParameter,
    FunctionType,
    SchemaGraph,
)
from dataverse_gen.schema.edmx_parser import EdmxParser
from dataverse_gen.schema.reference_filter import ReferenceFilter


class TestReferenceFilterSample:
    """Filter the sample document."""

    @pytest.fixture(autouse=True)
    def _parse(self, edmx_text):
        self.graph = EdmxParser().parse(edmx_text)

    def _filter(self, entities=None, actions=None, functions=None):
        ReferenceFilter().filter(self.graph, entities=entities, actions=actions, functions=functions)

    def test_empty_allow_lists_select_nothing(self):
        self._filter()
        assert self.graph.entity_types == []
        assert self.graph.actions == []
        assert self.graph.functions == []
        assert self.graph.complex_types == []
        assert self.graph.enum_types == []

    def test_requested_entities_survive(self):
        self._filter(entities=["contact", "opportunity"])
        assert [e.name for e in self.graph.entity_types] == ["contact", "opportunity"]
        assert self.graph.complex_types == []

    def test_unknown_entity_ignored(self):
        self._filter(entities=["account", "doesnotexist"])
        assert [e.name for e in self.graph.entity_types] == ["account"]

    def test_action_references(self):
        self._filter(entities=["account"], actions=["new_BulkUpdate"], functions=["WhoAmI"])

        assert [a.name for a in self.graph.actions] == ["new_BulkUpdate"]
        assert [f.name for f in self.graph.functions] == ["WhoAmI"]
        assert [e.name for e in self.graph.entity_types] == ["account", "contact"]
        assert [c.name for c in self.graph.complex_types] == [
            "ExecuteScriptResponse",
            "Label",
            "LocalizedLabel",
            "Object",
            "WhoAmIResponse",
        ]
        assert [e.name for e in self.graph.enum_types] == ["SingleMember", "LabelKind"]

    def test_referrers_recorded(self):
        self._filter(actions=["new_BulkUpdate"])
        action = self.graph.actions[0]
        contact = next(e for e in self.graph.entity_types if e.name == "contact")
        assert len(contact.referenced_by) == 1
        assert contact.referenced_by[0] is action

    def test_complex_type_cycle_terminates(self):
        self._filter(actions=["new_BulkUpdate"])
        complex_types = {c.name: c for c in self.graph.complex_types}
        label, localized = complex_types["Label"], complex_types["LocalizedLabel"]
        assert localized.referenced_by == []
        assert localized.referenced_by_root == [label]
        assert label.referenced_by_root == [localized]

    def test_enum_reached_through_complex_type(self):
        self._filter(actions=["new_BulkUpdate"])
        label_kind = next(e for e in self.graph.enum_types if e.name == "LabelKind")
        assert label_kind.referenced_by == []
        assert [c.name for c in label_kind.referenced_by_root] == ["LocalizedLabel"]

    def test_collection_return_type_reference(self):
        self._filter(functions=["RetrieveOpportunities"])
        assert [e.name for e in self.graph.entity_types] == ["opportunity"]
        assert self.graph.complex_types == []

    def test_unselected_operation_does_not_reference(self):
        self._filter(actions=["WinOpportunity"])
        assert [e.name for e in self.graph.entity_types] == ["opportunity"]
        assert self.graph.functions == []


class TestReferenceFilterGraph:
    def test_operation_listed_once_per_target(self):
        account = EntityType(name="account")
        action = FunctionType(
            name="Merge",
            parameters=[
                FunctionParameter(name="Target", type="mscrm.account"),
                FunctionParameter(name="SubordinateId", type="mscrm.account"),
            ],
            return_type="mscrm.account",
        )
        graph = SchemaGraph(namespace="Microsoft.Dynamics.CRM", entity_types=[account], actions=[action])
        ReferenceFilter().filter(graph, actions=["Merge"])
        assert account.referenced_by == [action]

    def test_complex_type_wins_over_same_named_entity(self):
        entity = EntityType(name="Thing")
        complex_type = ComplexType(name="Thing")
        function = FunctionType(name="GetThing", return_type="mscrm.Thing")
        graph = SchemaGraph(
            namespace="Microsoft.Dynamics.CRM",
            entity_types=[entity],
            complex_types=[complex_type],
            functions=[function],
        )
        ReferenceFilter().filter(graph, functions=["GetThing"])
        assert graph.complex_types == [complex_type]
        assert graph.entity_types == []

    def test_self_referencing_complex_type(self):
        node = ComplexType(name="Node", properties=[EntityTypeProperty(name="Next", type="mscrm.Node")])
        kind = EnumType(name="Kind")
        node.properties.append(EntityTypeProperty(name="Kind", type="Collection(mscrm.Kind)"))
        function = FunctionType(name="GetNode", return_type="mscrm.Node")
        graph = SchemaGraph(
            namespace="Microsoft.Dynamics.CRM", complex_types=[node], enum_types=[kind], functions=[function]
        )
        ReferenceFilter().filter(graph, functions=["GetNode"])
        assert graph.complex_types == [node]
        assert node.referenced_by_root == [node]
        assert graph.enum_types == [kind]
