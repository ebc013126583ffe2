"""
Tests for contract validation.

Covers the structural layer and the business rules:
1. Tool schema input/output format for capability-enabled contracts
2. Recursion architecture warning
3. Quality score range
4. Execution role for capability-enabled contracts
5. Capability architecture tag severity
"""

import json

import pytest

from swarm_host.config import ValidationConfig
from swarm_host.host.registrar import CapabilityRegistrar
from swarm_host.registry.contract import AgentContract
from swarm_host.registry.registry import ContractRegistry
from swarm_host.registry.sources import InMemoryContractSource
from swarm_host.validation.validator import ContractValidator, ViolationKind


@pytest.fixture
def validator():
    return ContractValidator()


def test_valid_record_has_no_findings(validator, make_record):
    result = validator.validate(make_record())

    assert result.valid
    assert result.errors == []
    assert result.warnings == []
    assert result.agent_id == "AGT-001"


def test_accepts_mapped_contract(validator, make_record):
    result = validator.validate(AgentContract.from_wire(make_record()))
    assert result.valid


class TestQualityScore:
    @pytest.mark.parametrize("score", [1.5, -0.1, float("nan")])
    def test_out_of_range_yields_exactly_one_error(self, validator, make_record, score):
        result = validator.validate(make_record(QualityScore=score))

        assert not result.valid
        assert len(result.errors) == 1
        assert result.errors[0].path == "QualityScore"
        assert result.errors[0].kind == ViolationKind.BUSINESS

    @pytest.mark.parametrize("score", [0, 0.0, 0.5, 1, 1.0])
    def test_bounds_are_inclusive(self, validator, make_record, score):
        assert validator.validate(make_record(QualityScore=score)).valid

    def test_non_numeric_is_a_schema_error(self, validator, make_record):
        result = validator.validate(make_record(QualityScore="high"))

        assert result.error_paths() == ["QualityScore"]
        assert result.errors[0].kind == ViolationKind.SCHEMA

    @pytest.mark.parametrize("score", ["1.5", "0.5"])
    def test_numeric_string_is_not_coerced(self, validator, make_record, score):
        result = validator.validate(make_record(QualityScore=score))

        assert not result.valid
        assert result.error_paths() == ["QualityScore"]
        assert result.errors[0].kind == ViolationKind.SCHEMA


class TestCapabilityFlag:
    @pytest.mark.parametrize("flag", ["true", "yes", 1])
    def test_non_boolean_flag_is_rejected(self, validator, make_record, flag):
        result = validator.validate(make_record(MCPEnabled=flag, ToolSchema="{}", Architectures=[]))

        assert not result.valid
        assert "MCPEnabled" in result.error_paths()

    @pytest.mark.asyncio
    async def test_non_boolean_flag_never_reaches_registration(self, make_record, dispatcher):
        source = InMemoryContractSource([make_record(MCPEnabled="true", ToolSchema="{}", Architectures=[])])
        registry = ContractRegistry(source, ContractValidator())
        registrar = CapabilityRegistrar(dispatcher)

        registrar.register(await registry.fetch_eligible_contracts())

        assert len(registrar) == 0
        assert registry.snapshot.skipped[0].agent_id == "AGT-001"


class TestToolSchema:
    def test_missing_output_format(self, validator, make_record):
        schema = json.dumps({"input": {"parameters": {}}, "output": {}})
        result = validator.validate(make_record(ToolSchema=schema))

        assert not result.valid
        assert result.error_paths() == ["ToolSchema.output.format"]

    def test_missing_input(self, validator, make_record):
        schema = json.dumps({"output": {"format": "text"}})
        result = validator.validate(make_record(ToolSchema=schema))

        assert result.error_paths() == ["ToolSchema.input"]

    def test_unparseable_schema_reports_both(self, validator, make_record):
        result = validator.validate(make_record(ToolSchema="oops"))
        assert result.error_paths() == ["ToolSchema.input", "ToolSchema.output.format"]

    def test_not_required_when_capability_disabled(self, validator, make_record):
        result = validator.validate(make_record(MCPEnabled=False, ToolSchema="{}", Architectures=[]))

        assert result.valid
        assert result.warnings == []


class TestExecutionPattern:
    @pytest.mark.parametrize("pattern", ["Recursive", "Hybrid"])
    def test_recursive_without_tag_warns(self, validator, make_record, pattern):
        result = validator.validate(make_record(ExecutionPattern=pattern))

        assert result.valid
        assert [w.path for w in result.warnings] == ["ExecutionPattern"]

    def test_recursive_with_tag_is_silent(self, validator, make_record):
        result = validator.validate(
            make_record(ExecutionPattern="Recursive", Architectures=["MCP-Swarm", "RCOP"])
        )
        assert result.warnings == []


class TestExecutionRole:
    def test_missing_role_reported_by_both_layers(self, validator, make_record):
        record = make_record()
        del record["Role"]

        result = validator.validate(record)

        kinds = sorted(e.kind.value for e in result.errors if e.path == "Role")
        assert kinds == ["business", "schema"]

    def test_invalid_role_without_capability_is_schema_only(self, validator, make_record):
        result = validator.validate(make_record(Role="Overlord", MCPEnabled=False))
        assert [e.kind for e in result.errors] == [ViolationKind.SCHEMA]


class TestCapabilityTag:
    def test_missing_tag_warns_by_default(self, validator, make_record):
        result = validator.validate(make_record(Architectures=[]))

        assert result.valid
        assert [w.path for w in result.warnings] == ["Architectures"]

    def test_missing_tag_as_error(self, make_record):
        validator = ContractValidator(ValidationConfig(capability_tag_severity="error"))
        result = validator.validate(make_record(Architectures=["RCOP"]))

        assert result.error_paths() == ["Architectures"]

    def test_missing_tag_ignored(self, make_record):
        validator = ContractValidator(ValidationConfig(capability_tag_severity="ignore"))
        result = validator.validate(make_record(Architectures=[]))

        assert result.valid
        assert result.warnings == []

    def test_custom_tag(self, make_record):
        validator = ContractValidator(ValidationConfig(capability_tag="A2A"))
        result = validator.validate(make_record(Architectures=["A2A"]))
        assert result.warnings == []


def test_non_mapping_record(validator):
    result = validator.validate("AGT-001")

    assert not result.valid
    assert result.error_paths() == ["root"]


def test_validate_batch_isolates_records(validator, make_record):
    records = [
        make_record(),
        {"Name": "Nameless"},
        make_record(AgentID="AGT-002", QualityScore=3),
    ]

    results = validator.validate_batch(records)

    assert list(results) == ["AGT-001", "record[1]", "AGT-002"]
    assert results["AGT-001"].valid
    assert not results["record[1]"].valid
    assert results["AGT-002"].error_paths() == ["QualityScore"]


def test_result_to_dict(validator, make_record):
    data = validator.validate(make_record(QualityScore=2)).to_dict()

    assert data["agentId"] == "AGT-001"
    assert data["valid"] is False
    assert data["errors"][0]["path"] == "QualityScore"
