"""
Tests for the agent contract model and its wire mapping.
"""

import json

import pytest

from swarm_host.errors import ContractMappingError
from swarm_host.registry.contract import AgentContract, ExecutionContext, Priority
from swarm_host.registry.schema import (
    AgentStatus,
    AutonomyLevel,
    ExecutionPattern,
    Role,
    parse_tool_schema,
)


class TestFromWire:
    def test_maps_every_field(self, make_record):
        contract = AgentContract.from_wire(make_record())

        assert contract.id == "AGT-001"
        assert contract.name == "Data Analyst"
        assert contract.role == Role.SPECIALIST
        assert contract.autonomy_level == AutonomyLevel.SEMI_AUTONOMOUS
        assert contract.execution_pattern == ExecutionPattern.SEQUENTIAL
        assert contract.capability_enabled is True
        assert contract.status == AgentStatus.ACTIVE
        assert contract.model_identifier == "gemini-2.5-flash"
        assert contract.architectures == ("MCP-Swarm",)
        assert contract.is_active
        assert contract.output_format == "JSON"
        assert contract.input_schema["required"] == ["query"]

    def test_unparseable_tool_schema_becomes_empty(self, make_record):
        contract = AgentContract.from_wire(make_record(ToolSchema="{not json"))

        assert contract.invocation_schema == {}
        assert contract.output_format is None
        assert contract.to_wire()["ToolSchema"] == "{}"

    def test_tool_schema_may_be_an_object(self, make_record):
        contract = AgentContract.from_wire(make_record(ToolSchema={"input": {"a": 1}}))
        assert contract.input_schema == {"a": 1}

    def test_missing_required_field_raises(self, make_record):
        record = make_record()
        del record["Role"]

        with pytest.raises(ContractMappingError) as exc_info:
            AgentContract.from_wire(record)

        assert [e["path"] for e in exc_info.value.errors] == ["Role"]

    def test_unknown_enum_value_raises(self, make_record):
        with pytest.raises(ContractMappingError):
            AgentContract.from_wire(make_record(AutonomyLevel="Level 9 - Omniscient"))

    def test_non_mapping_raises(self):
        with pytest.raises(ContractMappingError):
            AgentContract.from_wire(["AGT-001"])

    def test_unknown_wire_keys_are_ignored(self, make_record):
        contract = AgentContract.from_wire(make_record(Owner="platform-team"))
        assert "Owner" not in contract.to_wire()


class TestToWire:
    def test_round_trip(self, make_record):
        contract = AgentContract.from_wire(make_record())
        assert AgentContract.from_wire(contract.to_wire()) == contract

    def test_round_trip_without_model(self, make_record):
        record = make_record()
        del record["VertexAIModel"]
        contract = AgentContract.from_wire(record)

        wire = contract.to_wire()
        assert "VertexAIModel" not in wire
        assert AgentContract.from_wire(wire) == contract

    def test_tool_schema_is_canonical_json(self, make_record):
        wire = AgentContract.from_wire(make_record()).to_wire()
        assert json.loads(wire["ToolSchema"])["output"] == {"format": "JSON"}


class TestSchemaHelpers:
    @pytest.mark.parametrize("raw", ["", "   ", "[1, 2]", "null", 42, None])
    def test_parse_tool_schema_degrades_to_empty(self, raw):
        assert parse_tool_schema(raw) == {}

    def test_autonomy_levels_are_ordered(self):
        assert AutonomyLevel.GUIDED < AutonomyLevel.AUTONOMOUS
        assert AutonomyLevel.from_level(4) == AutonomyLevel.SELF_IMPROVING
        assert sorted(AutonomyLevel)[0] == AutonomyLevel.GUIDED

    def test_unknown_autonomy_level(self):
        with pytest.raises(ValueError):
            AutonomyLevel.from_level(7)


class TestExecutionContext:
    def test_new_generates_distinct_trace_ids(self):
        first = ExecutionContext.new()
        second = ExecutionContext.new()

        assert len(first.trace_id) == 32
        assert first.trace_id != second.trace_id
        assert first.priority == Priority.MEDIUM
        assert first.context_window == []

    def test_context_window_is_copied(self):
        fragments = ["earlier answer"]
        context = ExecutionContext.new(Priority.HIGH, fragments)
        fragments.append("later")

        assert context.context_window == ["earlier answer"]
