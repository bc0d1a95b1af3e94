"""Tests for the requirement tables and their data classes."""

import dataclasses
import json
import logging

import pytest

from omo_config.core.requirements import (
    AGENT_MODEL_REQUIREMENTS,
    ALL_AGENTS,
    ALL_CATEGORIES,
    CATEGORY_MODEL_REQUIREMENTS,
    FallbackChainEntry,
    ModelRequirements,
    get_agent_requirements,
    get_category_requirements,
    load_requirement_tables,
    parse_requirement_table,
)


class TestFallbackChainEntry:
    """Tests for FallbackChainEntry."""

    def test_providers_stored_as_tuple(self):
        entry = FallbackChainEntry(providers=["openai", "opencode"], model="gpt-5.2")
        assert entry.providers == ("openai", "opencode")

    def test_single_provider_string_is_wrapped(self):
        entry = FallbackChainEntry(providers="openai", model="gpt-5.2")
        assert entry.providers == ("openai",)

    def test_empty_providers_rejected(self):
        with pytest.raises(ValueError):
            FallbackChainEntry(providers=(), model="gpt-5.2")

    def test_empty_model_rejected(self):
        with pytest.raises(ValueError):
            FallbackChainEntry(providers=("openai",), model="")

    def test_is_frozen(self):
        entry = FallbackChainEntry(providers=("openai",), model="gpt-5.2")
        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.model = "gpt-4"

    def test_target_ids(self):
        entry = FallbackChainEntry(providers=("openai", "opencode"), model="gpt-5.2", variant="high")
        assert entry.target_ids() == ("openai/gpt-5.2", "opencode/gpt-5.2")

    def test_dict_round_trip(self):
        entry = FallbackChainEntry(providers=("openai",), model="gpt-5.2", variant="high")
        assert entry.to_dict() == {"providers": ["openai"], "model": "gpt-5.2", "variant": "high"}
        assert FallbackChainEntry.from_dict(entry.to_dict()) == entry


class TestModelRequirements:
    """Tests for ModelRequirements."""

    def test_from_camel_case(self):
        req = ModelRequirements.from_dict(
            {
                "fallbackChain": [{"providers": ["openai"], "model": "gpt-5.2-codex", "variant": "medium"}],
                "requiresModel": "gpt-5.2-codex",
            }
        )
        assert req.requires_model == "gpt-5.2-codex"
        assert req.fallback_chain[0].variant == "medium"

    def test_from_snake_case(self):
        req = ModelRequirements.from_dict(
            {"fallback_chain": [{"providers": ["google"], "model": "gemini-3-pro"}]}
        )
        assert req.fallback_chain[0].providers == ("google",)
        assert req.requires_model is None

    def test_to_dict_uses_camel_case(self):
        req = CATEGORY_MODEL_REQUIREMENTS["deep"]
        data = req.to_dict()
        assert data["requiresModel"] == "gpt-5.2-codex"
        assert data["fallbackChain"][0]["model"] == "gpt-5.2-codex"


class TestBuiltInTables:
    """Tests for the shipped requirement tables."""

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            AGENT_MODEL_REQUIREMENTS["new-agent"] = ModelRequirements()
        with pytest.raises(TypeError):
            CATEGORY_MODEL_REQUIREMENTS["new-category"] = ModelRequirements()

    def test_every_entry_has_a_chain(self):
        for table in (AGENT_MODEL_REQUIREMENTS, CATEGORY_MODEL_REQUIREMENTS):
            for name, req in table.items():
                assert req.fallback_chain, name

    def test_name_tuples_follow_tables(self):
        assert ALL_AGENTS == tuple(AGENT_MODEL_REQUIREMENTS)
        assert ALL_CATEGORIES == tuple(CATEGORY_MODEL_REQUIREMENTS)

    def test_librarian_chain(self):
        chain = AGENT_MODEL_REQUIREMENTS["librarian"].fallback_chain
        assert [(e.providers, e.model, e.variant) for e in chain] == [
            (("zai-coding-plan",), "glm-4.7", None),
            (("anthropic",), "claude-sonnet-4-5", None),
        ]

    def test_hard_requirements(self):
        assert AGENT_MODEL_REQUIREMENTS["hephaestus"].requires_model == "gpt-5.2-codex"
        assert CATEGORY_MODEL_REQUIREMENTS["artistry"].requires_model == "gemini-3-pro"
        assert AGENT_MODEL_REQUIREMENTS["oracle"].requires_model is None

    def test_lookup_helpers(self):
        assert get_agent_requirements("oracle") is AGENT_MODEL_REQUIREMENTS["oracle"]
        assert get_category_requirements("quick") is CATEGORY_MODEL_REQUIREMENTS["quick"]
        assert get_agent_requirements("nobody") is None
        assert get_category_requirements("nothing") is None


class TestLoadRequirementTables:
    """Tests for replacing the tables from a schema file."""

    def test_no_file_uses_built_ins(self, tmp_path):
        agents, categories = load_requirement_tables(tmp_path / "missing.json")
        assert agents is AGENT_MODEL_REQUIREMENTS
        assert categories is CATEGORY_MODEL_REQUIREMENTS

    def test_none_uses_built_ins(self):
        assert load_requirement_tables(None) == (AGENT_MODEL_REQUIREMENTS, CATEGORY_MODEL_REQUIREMENTS)

    def test_replaces_only_present_tables(self, tmp_path):
        schema = tmp_path / "schema.json"
        schema.write_text(
            json.dumps(
                {
                    "CATEGORY_MODEL_REQUIREMENTS": {
                        "tiny": {"fallbackChain": [{"providers": ["opencode"], "model": "gpt-5-nano"}]}
                    }
                }
            )
        )
        agents, categories = load_requirement_tables(schema)
        assert agents is AGENT_MODEL_REQUIREMENTS
        assert list(categories) == ["tiny"]
        with pytest.raises(TypeError):
            categories["other"] = ModelRequirements()

    def test_invalid_json_falls_back_with_warning(self, tmp_path, caplog):
        schema = tmp_path / "schema.json"
        schema.write_text("{not json")
        with caplog.at_level(logging.WARNING):
            agents, categories = load_requirement_tables(schema)
        assert agents is AGENT_MODEL_REQUIREMENTS
        assert categories is CATEGORY_MODEL_REQUIREMENTS
        assert "Failed to load requirement schema" in caplog.text

    def test_invalid_utf8_falls_back(self, tmp_path):
        schema = tmp_path / "schema.json"
        schema.write_bytes(b"\xff\xfe{}")
        assert load_requirement_tables(schema) == (AGENT_MODEL_REQUIREMENTS, CATEGORY_MODEL_REQUIREMENTS)

    def test_malformed_entry_keeps_built_in_table(self, tmp_path, caplog):
        schema = tmp_path / "schema.json"
        schema.write_text(
            json.dumps(
                {"AGENT_MODEL_REQUIREMENTS": {"oracle": {"fallbackChain": [{"providers": [], "model": "x"}]}}}
            )
        )
        with caplog.at_level(logging.WARNING):
            agents, _ = load_requirement_tables(schema)
        assert agents is AGENT_MODEL_REQUIREMENTS
        assert "Ignoring AGENT_MODEL_REQUIREMENTS" in caplog.text

    def test_parse_requirement_table(self):
        table = parse_requirement_table({"x": {"fallbackChain": [{"providers": ["a"], "model": "m"}]}, "y": None})
        assert table["x"].fallback_chain[0].target_ids() == ("a/m",)
        assert table["y"].fallback_chain == ()
