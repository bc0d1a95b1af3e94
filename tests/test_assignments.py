"""Tests for editing model assignments."""

import copy

import pytest

from omo_config.assignments import (
    AssignmentChange,
    apply_changes,
    plan_recommended_changes,
    plan_resolved_changes,
    set_agent_model,
    set_category_model,
)
from omo_config.core.model_resolution import ModelResolver
from omo_config.core.requirements import FallbackChainEntry, ModelRequirements


@pytest.fixture
def resolver():
    """Two agents with single-entry chains and no host default."""
    return ModelResolver(
        agent_requirements={
            "oracle": ModelRequirements(fallback_chain=(FallbackChainEntry(("openai",), "gpt-5.2", "high"),)),
            "librarian": ModelRequirements(
                fallback_chain=(FallbackChainEntry(("anthropic",), "claude-sonnet-4-5"),)
            ),
        },
        category_requirements={},
        system_default=lambda: None,
    )


class TestSetModel:
    """Tests for set_agent_model and set_category_model."""

    def test_does_not_mutate_input(self):
        config = {"agents": {"oracle": {"model": "a/b", "category": "deep"}}}
        before = copy.deepcopy(config)
        updated = set_agent_model(config, "oracle", "openai/gpt-5.2")
        assert config == before
        assert updated["agents"]["oracle"] == {"model": "openai/gpt-5.2", "category": "deep"}

    def test_keeps_variant_unless_given(self):
        config = {"agents": {"oracle": {"model": "a/b", "variant": "high"}}}
        assert set_agent_model(config, "oracle", "c/d")["agents"]["oracle"]["variant"] == "high"
        assert set_agent_model(config, "oracle", "c/d", "low")["agents"]["oracle"]["variant"] == "low"

    def test_creates_missing_sections(self):
        assert set_agent_model({"agents": None}, "oracle", "a/b") == {"agents": {"oracle": {"model": "a/b"}}}
        assert set_category_model({}, "quick", "google/gemini-3-flash", "low") == {
            "categories": {"quick": {"model": "google/gemini-3-flash", "variant": "low"}}
        }


class TestPlanRecommendedChanges:
    """Tests for score-based planning."""

    MODELS = [{"id": "google/gemini-3-flash", "providerID": "google"}]

    def test_proposes_top_model(self):
        config = {"agents": {"explore": {"model": "x/y"}}}
        changes = plan_recommended_changes(self.MODELS, config)
        assert len(changes) == 1
        change = changes[0]
        assert (change.agent, change.current, change.proposed) == ("explore", "x/y", "google/gemini-3-flash")
        assert isinstance(change.score, int)

    def test_skips_current_and_unprofiled_agents(self):
        config = {"agents": {"explore": {"model": "google/gemini-3-flash"}, "custom": {"model": "x/y"}}}
        assert plan_recommended_changes(self.MODELS, config) == []

    def test_empty_catalog(self):
        assert plan_recommended_changes([], {"agents": {"explore": {}}}) == []


class TestPlanResolvedChanges:
    """Tests for pipeline-based planning."""

    def test_pins_every_agent(self, resolver):
        changes = plan_resolved_changes(resolver, ["openai/gpt-5.2", "anthropic/claude-sonnet-4-5"], {})
        assert [c.to_dict() for c in changes] == [
            {"agent": "oracle", "current": None, "proposed": "openai/gpt-5.2", "variant": "high", "score": None},
            {
                "agent": "librarian",
                "current": None,
                "proposed": "anthropic/claude-sonnet-4-5",
                "variant": None,
                "score": None,
            },
        ]

    def test_skips_agents_already_pinned(self, resolver):
        config = {"agents": {"oracle": {"model": "openai/gpt-5.2"}}}
        changes = plan_resolved_changes(resolver, ["openai/gpt-5.2"], config)
        assert [c.agent for c in changes] == ["librarian"]

    def test_configured_variant_wins(self, resolver):
        config = {"agents": {"oracle": {"model": "xai/grok-4", "variant": "low"}}}
        changes = plan_resolved_changes(resolver, ["openai/gpt-5.2"], config)
        assert changes[0] == AssignmentChange(
            agent="oracle", current="xai/grok-4", proposed="openai/gpt-5.2", variant="low"
        )

    def test_nothing_available(self, resolver):
        assert plan_resolved_changes(resolver, [], {}) == []


class TestApplyChanges:
    """Tests for apply_changes."""

    def test_writes_every_change(self):
        config = {"agents": {"oracle": {"model": "a/b"}}, "categories": {"quick": {"model": "c/d"}}}
        changes = [
            AssignmentChange(agent="oracle", current="a/b", proposed="openai/gpt-5.2", variant="high"),
            AssignmentChange(agent="explore", current=None, proposed="google/gemini-3-flash"),
        ]
        updated = apply_changes(config, changes)
        assert updated == {
            "agents": {
                "oracle": {"model": "openai/gpt-5.2", "variant": "high"},
                "explore": {"model": "google/gemini-3-flash"},
            },
            "categories": {"quick": {"model": "c/d"}},
        }
        assert config["agents"]["oracle"] == {"model": "a/b"}

    def test_no_changes_is_a_copy(self):
        config = {"agents": {}}
        updated = apply_changes(config, [])
        assert updated == config
        assert updated is not config
