"""
Workflow Registry Tests

Validates discovery of workflows and steps, code lookup and
re-registration.
"""

import logging

import pytest

from stepbridge.core.registry import WorkflowRegistry
from stepbridge.errors import (
    StepNotFoundError,
    WorkflowDiscoveryFailedError,
    WorkflowNotFoundError,
)
from stepbridge.resources import workflow


def send_welcome(controls):
    return {"subject": "Welcome", "body": "Hello"}


def sendgrid_overrides(controls, outputs):
    return {"ipPoolName": "transactional"}


async def welcome_execute(ctx):
    digest = await ctx.step.digest("collect", lambda controls: {"amount": 1, "unit": "hours"})
    await ctx.step.email(
        "welcome-email",
        send_welcome,
        providers={"sendgrid": sendgrid_overrides},
    )
    recorded.append(digest)


recorded = []


@pytest.fixture
def registry():
    return WorkflowRegistry()


@pytest.fixture
def welcome():
    return workflow(
        "welcome",
        welcome_execute,
        payload_schema={
            "type": "object",
            "properties": {"name": {"type": "string"}},
            "required": ["name"],
        },
        name="Welcome",
        tags=["onboarding"],
    )


class TestDiscovery:
    """Registration runs workflows in discovery mode."""

    @pytest.mark.asyncio
    async def test_mock_payload_does_not_alias_schema_defaults(self, registry):
        """Mutating the discovery payload leaves the stored schema untouched."""
        async def tagging(ctx):
            ctx.payload["tags"].append("added")
            await ctx.step.sms("send-sms", lambda controls: {"body": "b"})

        payload_schema = {
            "type": "object",
            "properties": {"tags": {"type": "array", "default": []}},
        }
        await registry.add_workflows([workflow("tagging", tagging, payload_schema=payload_schema)])

        discovered = registry.get_workflow("tagging")
        assert discovered.payload_json_schema["properties"]["tags"]["default"] == []
        assert payload_schema["properties"]["tags"]["default"] == []

    @pytest.mark.asyncio
    async def test_steps_recorded_in_order(self, registry, welcome):
        """Verify steps are recorded in call order."""
        await registry.add_workflows([welcome])

        discovered = registry.get_workflow("welcome")

        assert [step.step_id for step in discovered.steps] == ["collect", "welcome-email"]
        assert discovered.get_step("welcome-email").sanitized

    @pytest.mark.asyncio
    async def test_discovery_returns_mock_results(self, registry, welcome):
        """Verify discovery hands mock results back to the workflow."""
        recorded.clear()

        await registry.add_workflows([welcome])

        assert recorded == [{"events": []}]

    @pytest.mark.asyncio
    async def test_discover_output(self, registry, welcome):
        """Verify the discover output carries schemas and source."""
        await registry.add_workflows([welcome])

        output = registry.discover().to_wire()

        wf = output["workflows"][0]
        assert wf["workflowId"] == "welcome"
        assert wf["name"] == "Welcome"
        assert wf["tags"] == ["onboarding"]
        assert wf["payload"]["schema"]["required"] == ["name"]
        assert "async def welcome_execute" in wf["code"]

        email = wf["steps"][1]
        assert email["stepId"] == "welcome-email"
        assert email["type"] == "email"
        assert "subject" in email["outputs"]["schema"]["properties"]
        assert email["providers"][0]["providerId"] == "sendgrid"
        assert "def sendgrid_overrides" in email["providers"][0]["code"]

    @pytest.mark.asyncio
    async def test_name_defaults_to_id(self, registry):
        """Verify the name falls back to the workflow id."""
        await registry.add_workflows([workflow("plain", welcome_execute)])

        output = registry.discover().to_wire()

        assert output["workflows"][0]["name"] == "plain"

    @pytest.mark.asyncio
    async def test_workflow_error_fails_discovery(self, registry):
        """Verify a raising workflow is not registered."""
        async def broken(ctx):
            raise RuntimeError("bad workflow")

        with pytest.raises(WorkflowDiscoveryFailedError) as exc_info:
            await registry.add_workflows([workflow("broken", broken)])

        assert isinstance(exc_info.value.cause, RuntimeError)
        assert registry.list_workflows() == []

    @pytest.mark.asyncio
    async def test_duplicate_step_id_fails_discovery(self, registry):
        """Verify duplicate step ids fail discovery."""
        async def duplicated(ctx):
            await ctx.step.sms("same", lambda controls: {"body": "a"})
            await ctx.step.sms("same", lambda controls: {"body": "b"})

        with pytest.raises(WorkflowDiscoveryFailedError):
            await registry.add_workflows([workflow("duplicated", duplicated)])

    @pytest.mark.asyncio
    async def test_reregistration_replaces(self, registry, welcome, caplog):
        """Verify re-registering a workflow replaces it with a warning."""
        async def replacement(ctx):
            await ctx.step.sms("only", lambda controls: {"body": "b"})

        await registry.add_workflows([welcome])
        with caplog.at_level(logging.WARNING):
            await registry.add_workflows([workflow("welcome", replacement)])

        assert [step.step_id for step in registry.get_workflow("welcome").steps] == ["only"]
        assert "already registered" in caplog.text

    @pytest.mark.asyncio
    async def test_counts(self, registry, welcome):
        """Verify workflow and step counts."""
        await registry.add_workflows([welcome])

        counts = registry.counts()

        assert counts.workflows == 1
        assert counts.steps == 2


class TestCode:
    """Source lookup."""

    @pytest.mark.asyncio
    async def test_workflow_code(self, registry, welcome):
        """Verify workflow source lookup."""
        await registry.add_workflows([welcome])

        assert "async def welcome_execute" in registry.get_code("welcome").code

    @pytest.mark.asyncio
    async def test_step_code(self, registry, welcome):
        """Verify step source lookup."""
        await registry.add_workflows([welcome])

        assert "def send_welcome" in registry.get_code("welcome", "welcome-email").code

    @pytest.mark.asyncio
    async def test_unknown_workflow(self, registry):
        """Verify lookup of an unknown workflow fails."""
        with pytest.raises(WorkflowNotFoundError):
            registry.get_code("missing")

    @pytest.mark.asyncio
    async def test_unknown_step(self, registry, welcome):
        """Verify lookup of an unknown step fails."""
        await registry.add_workflows([welcome])

        with pytest.raises(StepNotFoundError):
            registry.get_code("welcome", "missing")
