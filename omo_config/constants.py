"""Shipped defaults and agent profiles.

DEFAULTS is the baseline oh-my-opencode.json used for the first profile
and for completeness checks. AGENT_PROFILES describes what each agent
needs from a model and drives recommendations.
"""

from typing import Any, Dict

DEFAULT_PROFILE_NAME = "omo-default"
MIGRATED_PROFILE_NAME = "user-config"

DEFAULTS: Dict[str, Any] = {
    "google_auth": False,
    "agents": {
        "sisyphus": {"model": "anthropic/claude-opus-4-5"},
        "atlas": {"model": "anthropic/claude-sonnet-4-5"},
        "oracle": {"model": "openai/gpt-5.2"},
        "librarian": {"model": "anthropic/claude-sonnet-4-5"},
        "explore": {"model": "opencode/grok-code"},
        "multimodal-looker": {"model": "google/gemini-3-flash"},
    },
    "mcps": {
        "websearch_exa": {
            "url": "https://mcp.exa.ai/mcp?tools=web_search_exa,get_code_context_exa,crawling_exa",
            "type": "remote",
            "enabled": True,
        },
        "grep_app": {
            "url": "https://mcp.grep.app",
            "type": "remote",
        },
    },
}

# preferred: capability tags scored by model_catalog.score_model
AGENT_PROFILES: Dict[str, Dict[str, Any]] = {
    "sisyphus": {
        "description": "Primary orchestrator with extended thinking (Opus class)",
        "preferred": ["reasoning", "thinking", "large_context"],
        "minContext": 128000,
    },
    "atlas": {
        "description": "Plan executor that drives todo lists to completion (Sonnet class)",
        "preferred": ["reasoning", "large_context"],
        "minContext": 128000,
    },
    "hephaestus": {
        "description": "Autonomous deep worker for long coding tasks (Codex class)",
        "preferred": ["reasoning", "large_context"],
        "minContext": 200000,
    },
    "oracle": {
        "description": "Architecture decisions, debugging, code review (GPT-5.2 class)",
        "preferred": ["reasoning", "large_context"],
        "minContext": 128000,
    },
    "librarian": {
        "description": "Multi-repo research, docs, GitHub examples (Sonnet class)",
        "preferred": ["reasoning", "large_context"],
        "minContext": 128000,
    },
    "explore": {
        "description": "Fast contextual grep for codebase exploration (Grok/Flash class)",
        "preferred": ["fast", "large_context"],
        "minContext": 64000,
    },
    "multimodal-looker": {
        "description": "PDF/image analysis, visual content (Flash class)",
        "preferred": ["multimodal", "image_input", "pdf_input", "fast"],
        "minContext": 32000,
    },
    "prometheus": {
        "description": "Interview-driven planner that writes work plans (Opus class)",
        "preferred": ["reasoning", "thinking", "large_context"],
        "minContext": 128000,
    },
    "metis": {
        "description": "Pre-planning consultant that spots hidden requirements",
        "preferred": ["reasoning", "thinking"],
        "minContext": 128000,
    },
    "momus": {
        "description": "Plan reviewer that rejects vague or unverifiable plans",
        "preferred": ["reasoning", "large_context"],
        "minContext": 128000,
    },
}
