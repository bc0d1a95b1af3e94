"""Completeness check of a configuration against the shipped defaults."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from omo_config.constants import AGENT_PROFILES, DEFAULTS


@dataclass
class MissingAgent:
    name: str
    default_model: Optional[str]
    description: str


@dataclass
class MissingMcp:
    name: str
    config: Dict[str, Any]


@dataclass
class ConfigIssues:
    """Agents and MCP servers missing from, or unknown to, the defaults."""

    missing_agents: List[MissingAgent] = field(default_factory=list)
    missing_mcps: List[MissingMcp] = field(default_factory=list)
    extra_agents: List[Dict[str, Any]] = field(default_factory=list)
    extra_mcps: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.missing_agents or self.missing_mcps or self.extra_agents or self.extra_mcps)

    def to_dict(self) -> dict:
        return asdict(self)


def validate_config(
    config: Optional[Mapping[str, Any]],
    defaults: Mapping[str, Any] = DEFAULTS,
) -> Optional[ConfigIssues]:
    """Compare ``config`` with ``defaults``; None when nothing differs."""
    config = config or {}
    config_agents = config.get("agents") or {}
    config_mcps = config.get("mcps") or {}
    default_agents = defaults.get("agents") or {}
    default_mcps = defaults.get("mcps") or {}

    issues = ConfigIssues()

    for agent_name, default_block in default_agents.items():
        if not config_agents.get(agent_name):
            profile = AGENT_PROFILES.get(agent_name) or {}
            issues.missing_agents.append(
                MissingAgent(
                    name=agent_name,
                    default_model=default_block.get("model"),
                    description=profile.get("description", "OmO built-in agent"),
                )
            )

    for mcp_name, default_mcp in default_mcps.items():
        if not config_mcps.get(mcp_name):
            issues.missing_mcps.append(MissingMcp(name=mcp_name, config=dict(default_mcp)))

    for agent_name, block in config_agents.items():
        if agent_name not in default_agents:
            issues.extra_agents.append({"name": agent_name, "model": (block or {}).get("model")})

    for mcp_name in config_mcps:
        if mcp_name not in default_mcps:
            issues.extra_mcps.append({"name": mcp_name})

    return issues if issues.has_issues else None


# These helpers edit the config in place; the caller owns the dict being built.


def add_missing_agent(config: Dict[str, Any], agent: MissingAgent) -> None:
    if not config.get("agents"):
        config["agents"] = {}
    config["agents"][agent.name] = {"model": agent.default_model}


def add_missing_mcp(config: Dict[str, Any], mcp: MissingMcp) -> None:
    if not config.get("mcps"):
        config["mcps"] = {}
    config["mcps"][mcp.name] = dict(mcp.config)


def add_all_missing(config: Dict[str, Any], issues: ConfigIssues) -> int:
    """Add every missing agent and MCP server. Returns how many were added."""
    for agent in issues.missing_agents:
        add_missing_agent(config, agent)
    for mcp in issues.missing_mcps:
        add_missing_mcp(config, mcp)
    return len(issues.missing_agents) + len(issues.missing_mcps)
