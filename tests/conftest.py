"""Shared fixtures: contract records and a scripted model backend."""

import asyncio
import json

import pytest

from swarm_host.dispatch.clients import ModelClientCache
from swarm_host.dispatch.executor import Dispatcher
from swarm_host.registry.contract import AgentContract

DEFAULT_TOOL_SCHEMA = {
    "description": "Answers analytical questions",
    "input": {"parameters": {"query": {"type": "string"}}, "required": ["query"]},
    "output": {"format": "JSON"},
}


def _make_record(**overrides):
    record = {
        "AgentID": "AGT-001",
        "Name": "Data Analyst",
        "Role": "Specialist",
        "Category": "Analytics",
        "AutonomyLevel": "Level 2 - Semi-Autonomous",
        "ExecutionPattern": "Sequential",
        "MCPEnabled": True,
        "ToolSchema": json.dumps(DEFAULT_TOOL_SCHEMA),
        "QualityScore": 0.9,
        "Status": "Active",
        "VertexAIModel": "gemini-2.5-flash",
        "Architectures": ["MCP-Swarm"],
    }
    record.update(overrides)
    return record


@pytest.fixture
def make_record():
    """Factory for a valid, active, capability-enabled wire record."""
    return _make_record


@pytest.fixture
def make_contract():
    def factory(**overrides):
        return AgentContract.from_wire(_make_record(**overrides))
    return factory


class FakeModelClient:
    """Model client that replays a scripted reply and records its calls."""

    def __init__(self, model, reply="ok", error=None, delay=0.0):
        self.model = model
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls = []

    async def generate(self, system_text, task_text):
        self.calls.append((system_text, task_text))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.reply


class FakeClientFactory:
    """Client factory; ``behaviour`` maps a model to FakeModelClient kwargs."""

    def __init__(self):
        self.behaviour = {}
        self.created = []

    def __call__(self, model):
        client = FakeModelClient(model, **self.behaviour.get(model, {}))
        self.created.append(client)
        return client


@pytest.fixture
def client_factory():
    return FakeClientFactory()


@pytest.fixture
def cache(client_factory):
    return ModelClientCache(client_factory, default_model="gemini-2.5-pro")


@pytest.fixture
def dispatcher(cache):
    return Dispatcher(cache, timeout_seconds=5.0)
