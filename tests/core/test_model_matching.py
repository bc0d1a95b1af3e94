"""Tests for model id normalization and the fuzzy matcher."""

import pytest

from omo_config.core.model_matching import (
    extract_providers_from_models,
    fuzzy_match_model,
    get_base_name,
    get_provider,
    normalize_model_name,
    split_model_id,
)


class TestNormalizeModelName:
    """Tests for normalize_model_name."""

    def test_lowercases(self):
        assert normalize_model_name("Claude-Opus-4-5") == "claude-opus-4-5"

    def test_strips_antigravity_prefix(self):
        assert normalize_model_name("antigravity-gemini-3-pro") == "gemini-3-pro"

    def test_strips_preview_suffix(self):
        assert normalize_model_name("gemini-3-flash-preview") == "gemini-3-flash"

    def test_strips_tee_suffix(self):
        assert normalize_model_name("glm-4.7-tee") == "glm-4.7"

    def test_strips_prefix_and_suffix_together(self):
        assert normalize_model_name("Antigravity-Gemini-3-Pro-Preview") == "gemini-3-pro"

    def test_preview_is_stripped_before_tee(self):
        """Only a trailing -preview is removed, so -preview-tee keeps -preview."""
        assert normalize_model_name("model-preview-tee") == "model-preview"

    def test_prefix_only_at_start(self):
        assert normalize_model_name("my-antigravity-model") == "my-antigravity-model"

    @pytest.mark.parametrize("name", ["", "gpt-5.2", "claude-opus-4-5"])
    def test_plain_names_unchanged(self, name):
        assert normalize_model_name(name) == name


class TestSplitModelId:
    """Tests for id splitting helpers."""

    def test_splits_on_first_slash(self):
        assert split_model_id("openrouter/anthropic/claude") == ("openrouter", "anthropic/claude")

    def test_no_slash_is_all_base(self):
        assert split_model_id("gpt-5.2") == ("", "gpt-5.2")

    def test_trailing_slash_keeps_whole_id(self):
        assert split_model_id("openai/") == ("openai", "openai/")

    def test_get_provider(self):
        assert get_provider("google/gemini-3-pro") == "google"
        assert get_provider("gemini-3-pro") == ""

    def test_base_name_uses_last_slash(self):
        assert get_base_name("openrouter/openai/gpt-5.2-codex") == "gpt-5.2-codex"
        assert get_base_name("gpt-5.2") == "gpt-5.2"


class TestExtractProviders:
    """Tests for extract_providers_from_models."""

    def test_unique_in_first_appearance_order(self):
        models = ["openai/gpt-5.2", "anthropic/claude", "openai/gpt-5-nano", "google/gemini"]
        assert extract_providers_from_models(models) == ["openai", "anthropic", "google"]

    def test_ignores_ids_without_provider(self):
        assert extract_providers_from_models(["bare-model", "xai/grok"]) == ["xai"]

    def test_empty(self):
        assert extract_providers_from_models([]) == []


class TestFuzzyMatchModel:
    """Tests for the graduated matching cascade."""

    def test_exact_match(self):
        assert fuzzy_match_model(["openai/gpt-5.2"], "openai/gpt-5.2") == "openai/gpt-5.2"

    def test_case_insensitive_returns_candidate_as_given(self):
        assert fuzzy_match_model(["OpenAI/GPT-5.2"], "openai/gpt-5.2") == "OpenAI/GPT-5.2"

    def test_dated_release_matches_via_containment(self):
        available = ["anthropic/claude-opus-4-5-20251101"]
        assert fuzzy_match_model(available, "anthropic/claude-opus-4-5") == available[0]

    def test_target_longer_than_candidate_matches(self):
        assert fuzzy_match_model(["openai/gpt-5.2"], "openai/gpt-5.2-20260101") == "openai/gpt-5.2"

    def test_normalization_equivalence(self):
        available = ["google/antigravity-gemini-3-pro-preview"]
        assert fuzzy_match_model(available, "google/gemini-3-pro") == available[0]

    def test_substring_match(self):
        available = ["openrouter/anthropic/claude-sonnet-4-5"]
        assert fuzzy_match_model(available, "anthropic/claude-sonnet-4-5") == available[0]

    def test_token_overlap_same_provider(self):
        """claude-opus-4.5-20251101 shares 'claude' and 'opus' with claude-opus-4-5."""
        available = ["anthropic/claude-opus-4.5-20251101"]
        assert fuzzy_match_model(available, "anthropic/claude-opus-4-5") == available[0]

    def test_token_overlap_requires_same_provider(self):
        available = ["github-copilot/claude-opus-4.5-20251101"]
        assert fuzzy_match_model(available, "anthropic/claude-opus-4-5") is None

    def test_exact_base_matches_across_providers(self):
        """Rules before token overlap ignore the provider entirely."""
        available = ["openai/claude-opus-4-5"]
        assert fuzzy_match_model(available, "anthropic/claude-opus-4-5") == "openai/claude-opus-4-5"

    def test_containment_matches_across_providers(self):
        available = ["opencode/claude-opus-4-5-20251101"]
        assert fuzzy_match_model(available, "anthropic/claude-opus-4-5") == available[0]

    def test_short_tokens_do_not_count(self):
        """Only tokens longer than two characters count towards overlap."""
        assert fuzzy_match_model(["openai/o3-pro-max"], "openai/o3-pro-ultra") is None

    def test_three_character_tokens_count(self):
        assert fuzzy_match_model(["xai/abc-def-x1"], "xai/abc-def-y2") == "xai/abc-def-x1"

    def test_single_shared_token_is_not_enough(self):
        assert fuzzy_match_model(["google/gemini-3-flash"], "google/gemini-3-pro") is None

    def test_first_candidate_wins(self):
        """Scan order decides, even when a later candidate is an exact match."""
        available = ["openai/gpt-5.2-codex", "openai/gpt-5.2"]
        assert fuzzy_match_model(available, "openai/gpt-5.2") == "openai/gpt-5.2-codex"

    def test_no_match(self):
        assert fuzzy_match_model(["openai/gpt-5.2"], "google/gemini-3-pro") is None

    def test_empty_catalog(self):
        assert fuzzy_match_model([], "openai/gpt-5.2") is None

    def test_candidate_without_provider(self):
        assert fuzzy_match_model(["gpt-5.2"], "openai/gpt-5.2") == "gpt-5.2"

    def test_target_without_provider(self):
        assert fuzzy_match_model(["openai/gpt-5.2"], "gpt-5.2") == "openai/gpt-5.2"
