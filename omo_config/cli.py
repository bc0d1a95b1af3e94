"""Command-line interface for omo-config.

Each subcommand maps to a ``handle_*`` function that takes the parsed
arguments and returns True on success. ``main`` turns that into the exit
code: 0 on success, 1 when a resolution or validation failed, 2 for usage
and environment errors (catalog unavailable, bad files, profile errors).

Usage:
    omo-config resolve oracle
    omo-config --json agents --models anthropic/claude-opus-4-5,openai/gpt-5.2
    omo-config set oracle openai/gpt-5.2 --variant high
    omo-config profiles activate user-config
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from omo_config.exceptions import OmoConfigError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_ERROR = 2


# =============================================================================
# Shared helpers
# =============================================================================


def _emit_json(data: Any) -> None:
    from omo_config.messaging import emit_plain

    emit_plain(json.dumps(data, indent=2))


def _model_list_arg(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _config_path(args: argparse.Namespace):
    from omo_config.settings import get_path_settings

    return args.config or get_path_settings().config_file


def _available_model_records(args: argparse.Namespace) -> List[Dict[str, Any]]:
    """Catalog records from --models, else from the catalog command."""
    if args.models is not None:
        from omo_config.core.model_matching import split_model_id

        return [{"id": model_id, "providerID": split_model_id(model_id)[0]} for model_id in args.models]

    from omo_config.model_catalog import load_models

    return load_models().models


def _available_models(args: argparse.Namespace) -> List[str]:
    return [record["id"] for record in _available_model_records(args)]


def _build_resolver():
    from omo_config.core.model_resolution import ModelResolver
    from omo_config.core.requirements import load_requirement_tables
    from omo_config.settings import get_path_settings

    agents, categories = load_requirement_tables(get_path_settings().schema_file)
    return ModelResolver(agent_requirements=agents, category_requirements=categories)


def _load_config(args: argparse.Namespace) -> Dict[str, Any]:
    """The config file as a plain dict, checked against the UserConfig schema."""
    from omo_config.user_config import UserConfig, read_config_file

    raw = read_config_file(_config_path(args))
    UserConfig.from_raw(raw)
    return raw


def _save_config(args: argparse.Namespace, config: Dict[str, Any]) -> Optional[Path]:
    """Write to --config, or replace the main config after backing it up."""
    from omo_config.profiles import ConfigurationManager, write_json

    if args.config:
        write_json(Path(args.config), config)
        return None
    return ConfigurationManager().update_main_config_file(config)


def _with_variant(config, name: str, result):
    """Apply the configured variant precedence to a pipeline result."""
    from omo_config.core.model_resolution import resolve_variant

    if result is None or result.model is None:
        return result
    return replace(result, variant=resolve_variant(config, name, result.variant))


def _result_row(name: str, result) -> List[Optional[str]]:
    if result is None:
        return [name, None, None, None]
    return [name, result.model, result.variant, result.provenance.value]


# =============================================================================
# Resolution commands
# =============================================================================


def handle_resolve(args: argparse.Namespace) -> bool:
    """Resolve one agent or category."""
    from omo_config.messaging import emit_error, emit_info, emit_success
    from omo_config.user_config import load_user_config

    config = load_user_config(_config_path(args))
    resolver = _build_resolver()
    result = resolver.resolve(_available_models(args), config, args.name, args.ui_model)
    result = _with_variant(config, args.name, result)

    if args.json:
        _emit_json({"name": args.name, "result": result.to_dict() if result else None})
        return result is not None

    if result is None:
        emit_error(f'Could not resolve a model for "{args.name}": no models available')
        return False

    emit_success(f"{args.name}: {result.model}")
    if result.variant:
        emit_info(f"  Variant: {result.variant}")
    emit_info(f"  Source: {result.provenance.value}")
    return True


def handle_validate(args: argparse.Namespace) -> bool:
    """Validate agents and categories (all of them by default)."""
    from omo_config.core.model_validation import validate_agent_model, validate_category_model
    from omo_config.messaging import emit_error, emit_success
    from omo_config.user_config import load_user_config

    config = load_user_config(_config_path(args))
    resolver = _build_resolver()
    models = _available_models(args)

    names = args.names or list(resolver.agent_requirements) + list(resolver.category_requirements)
    results = {}
    for name in names:
        if name not in resolver.agent_requirements and name in resolver.category_requirements:
            results[name] = validate_category_model(name, models, config, resolver)
        else:
            results[name] = validate_agent_model(name, models, config, resolver)
        results[name] = _with_variant(config, name, results[name])

    all_valid = all(result.valid for result in results.values())

    if args.json:
        _emit_json({"valid": all_valid, "results": {n: r.to_dict() for n, r in results.items()}})
        return all_valid

    for name, result in results.items():
        if result.valid:
            emit_success(f"{name}: {result.model} ({result.provenance.value})")
        else:
            emit_error(f"{name}: {result.error}")
    return all_valid


def handle_agents(args: argparse.Namespace) -> bool:
    """Show the resolved model of every agent."""
    from omo_config.messaging import emit_table
    from omo_config.user_config import load_user_config

    config = load_user_config(_config_path(args))
    results = _build_resolver().resolve_all_agents(_available_models(args), config, args.ui_model)
    results = {name: _with_variant(config, name, result) for name, result in results.items()}

    if args.json:
        _emit_json({name: (r.to_dict() if r else None) for name, r in results.items()})
    else:
        emit_table(
            "Agents",
            ["Agent", "Model", "Variant", "Source"],
            [_result_row(name, result) for name, result in results.items()],
        )
    return all(result is not None for result in results.values())


def handle_categories(args: argparse.Namespace) -> bool:
    """Show every category with its defaults and resolved model."""
    from omo_config.categories import (
        get_category_default,
        get_category_default_with_available_providers,
        list_all_categories,
    )
    from omo_config.core.model_matching import extract_providers_from_models
    from omo_config.messaging import emit_table

    raw_config = _load_config(args)
    models = _available_models(args)
    providers = extract_providers_from_models(models)
    resolver = _build_resolver()
    results = resolver.resolve_all_categories(models, raw_config)

    rows = []
    for item in list_all_categories(resolver.category_requirements):
        name = item["name"]
        requirements = item["requirements"]
        rows.append(
            {
                "name": name,
                "default": get_category_default(name, raw_config),
                "available_default": get_category_default_with_available_providers(
                    name, raw_config, providers
                ),
                "requires_model": requirements.requires_model,
                "result": _with_variant(raw_config, name, results.get(name)),
            }
        )

    if args.json:
        _emit_json(
            {
                row["name"]: {
                    "default": row["default"],
                    "available_default": row["available_default"],
                    "requires_model": row["requires_model"],
                    "result": row["result"].to_dict() if row["result"] else None,
                }
                for row in rows
            }
        )
    else:
        emit_table(
            "Categories",
            ["Category", "Default", "Available default", "Model", "Variant", "Source"],
            [
                [row["name"], row["default"], row["available_default"]]
                + _result_row(row["name"], row["result"])[1:]
                for row in rows
            ],
        )
    return all(row["result"] is not None for row in rows)


# =============================================================================
# Catalog commands
# =============================================================================


def handle_models(args: argparse.Namespace) -> bool:
    """List the available models, optionally for one provider."""
    from omo_config.messaging import emit_table

    records = _available_model_records(args)
    if args.provider:
        records = [r for r in records if r.get("providerID") == args.provider]

    if args.json:
        _emit_json([r["id"] for r in records])
        return True

    emit_table(
        f"Models ({len(records)})",
        ["Model", "Name", "Context"],
        [[r["id"], r.get("name"), (r.get("limit") or {}).get("context")] for r in records],
    )
    return True


def handle_recommend(args: argparse.Namespace) -> bool:
    """Rank available models for an agent profile."""
    from omo_config.constants import AGENT_PROFILES
    from omo_config.messaging import emit_error, emit_table
    from omo_config.model_catalog import get_recommended_models
    from omo_config.settings import get_settings

    if args.agent not in AGENT_PROFILES:
        emit_error(f'No profile for agent "{args.agent}". Known: {", ".join(AGENT_PROFILES)}')
        return False

    limit = args.limit or get_settings().catalog.recommendation_limit
    raw_config = _load_config(args)
    ranked = get_recommended_models(_available_model_records(args), args.agent, raw_config, limit)

    if args.json:
        _emit_json([{"id": m["id"], "score": m["score"]} for m in ranked])
    else:
        emit_table(
            f"Recommended for {args.agent}",
            ["Model", "Score"],
            [[m["id"], m["score"]] for m in ranked],
        )
    return True


# =============================================================================
# Editing commands
# =============================================================================


def handle_set(args: argparse.Namespace) -> bool:
    """Assign a model (and optionally a variant) to an agent or category."""
    from omo_config.assignments import set_agent_model, set_category_model
    from omo_config.core.model_matching import fuzzy_match_model
    from omo_config.messaging import emit_error, emit_info, emit_success

    config = _load_config(args)
    if not args.no_check and fuzzy_match_model(_available_models(args), args.model) is None:
        emit_error(f'Model "{args.model}" is not available (use --no-check to set it anyway)')
        return False

    resolver = _build_resolver()
    if args.name not in resolver.agent_requirements and args.name in resolver.category_requirements:
        section = "categories"
        new_config = set_category_model(config, args.name, args.model, args.variant)
    else:
        section = "agents"
        new_config = set_agent_model(config, args.name, args.model, args.variant)
    backup = _save_config(args, new_config)

    if args.json:
        _emit_json(
            {
                "name": args.name,
                "section": section,
                "model": args.model,
                "variant": new_config[section][args.name].get("variant"),
                "backup": str(backup) if backup else None,
            }
        )
        return True

    emit_success(f"Set {args.name} to {args.model}")
    if args.variant:
        emit_info(f"  Variant: {args.variant}")
    if backup:
        emit_info(f"  Backup: {backup}")
    return True


def handle_apply_category(args: argparse.Namespace) -> bool:
    """Tag an agent with a delegation category."""
    from omo_config.categories import (
        apply_category_to_agent,
        get_agent_category,
        get_category_default,
        load_categories,
    )
    from omo_config.messaging import emit_info, emit_success

    config = _load_config(args)
    previous = get_agent_category(config, args.agent)
    new_config = apply_category_to_agent(config, args.agent, args.category, load_categories())
    backup = _save_config(args, new_config)
    default_model = get_category_default(args.category, new_config)

    if args.json:
        _emit_json(
            {
                "agent": args.agent,
                "category": args.category,
                "previous": previous,
                "default_model": default_model,
                "backup": str(backup) if backup else None,
            }
        )
        return True

    suffix = f' (was "{previous}")' if previous and previous != args.category else ""
    emit_success(f'Tagged {args.agent} with category "{args.category}"{suffix}')
    if default_model:
        emit_info(f"  Category default: {default_model}")
    return True


def handle_optimize(args: argparse.Namespace) -> bool:
    """Write the best available model into each agent block."""
    from omo_config.assignments import (
        apply_changes,
        plan_recommended_changes,
        plan_resolved_changes,
    )
    from omo_config.messaging import emit_info, emit_success, emit_table

    config = _load_config(args)
    if args.by_score:
        changes = plan_recommended_changes(_available_model_records(args), config)
    else:
        changes = plan_resolved_changes(_build_resolver(), _available_models(args), config)

    applied = bool(changes) and not args.dry_run
    backup = _save_config(args, apply_changes(config, changes)) if applied else None

    if args.json:
        _emit_json(
            {
                "changes": [change.to_dict() for change in changes],
                "applied": applied,
                "backup": str(backup) if backup else None,
            }
        )
        return True

    if not changes:
        emit_success("All agents already use their best available model")
        return True

    emit_table(
        "Proposed changes" if args.dry_run else "Changes",
        ["Agent", "Current", "New", "Variant"],
        [[c.agent, c.current, c.proposed, c.variant] for c in changes],
    )
    if applied:
        emit_success(f"Updated {len(changes)} agent(s)")
    else:
        emit_info("Dry run, nothing written")
    return True


# =============================================================================
# Profile commands
# =============================================================================


def handle_profiles(args: argparse.Namespace) -> bool:
    """Manage saved configuration profiles."""
    from omo_config.messaging import emit_info, emit_success, emit_table
    from omo_config.profiles import ConfigurationManager
    from omo_config.user_config import read_config_file

    manager = ConfigurationManager()
    action = args.profiles_action

    if action == "list":
        active = manager.get_active_config()
        names = manager.list_configurations()
        if args.json:
            _emit_json({"active": active, "profiles": names})
            return True
        rows = []
        for name in names:
            profile = manager.load_configuration(name)
            rows.append([("* " if name == active else "  ") + name, profile.description, profile.modified])
        emit_table("Profiles", ["Name", "Description", "Modified"], rows)
        return True

    if action == "save":
        config = read_config_file(_config_path(args))
        manager.save_configuration(args.name, args.description or "", config)
        emit_success(f'Saved current configuration as "{args.name}"')
    elif action == "activate":
        manager.activate(args.name)
        emit_success(f'Activated "{args.name}"')
    elif action == "delete":
        manager.delete_configuration(args.name)
        emit_success(f'Deleted "{args.name}"')
    elif action == "rename":
        manager.rename_configuration(args.old_name, args.new_name)
        emit_success(f'Renamed "{args.old_name}" to "{args.new_name}"')
    elif action == "export":
        dest = manager.export_configuration(args.name, args.dest)
        emit_success(f'Exported "{args.name}" to {dest}')
    elif action == "import":
        manager.import_configuration(args.source, args.name, args.description)
        emit_success(f'Imported {args.source} as "{args.name}"')
    elif action == "init":
        if manager.migrate_if_needed():
            emit_success(f'Profiles created, active: "{manager.get_active_config()}"')
        else:
            emit_info("Profiles already exist")
    return True


# =============================================================================
# Maintenance commands
# =============================================================================


def handle_migrate(args: argparse.Namespace) -> bool:
    """Migrate the main config to categories."""
    from omo_config.messaging import emit_info, emit_success
    from omo_config.migration import migrate_main_config

    migrated = migrate_main_config()
    if args.json:
        _emit_json({"migrated": migrated is not None, "config": migrated})
    elif migrated is None:
        emit_info("Config already migrated to categories")
    else:
        emit_success("Config migrated to categories")
    return True


def handle_check(args: argparse.Namespace) -> bool:
    """Compare the config with the shipped defaults; --fix adds what is missing."""
    from omo_config.config_validation import add_all_missing, validate_config
    from omo_config.messaging import emit_info, emit_success, emit_warning

    config = _load_config(args)
    issues = validate_config(config)

    if issues is None:
        if args.json:
            _emit_json({"issues": None})
        else:
            emit_success("Configuration is complete")
        return True

    added = 0
    if args.fix:
        added = add_all_missing(config, issues)
        _save_config(args, config)

    if args.json:
        _emit_json({"issues": issues.to_dict(), "added": added})
    else:
        for agent in issues.missing_agents:
            emit_warning(f"Missing agent {agent.name} (default {agent.default_model})")
        for mcp in issues.missing_mcps:
            emit_warning(f"Missing MCP server {mcp.name}")
        for extra in issues.extra_agents:
            emit_info(f"Custom agent {extra['name']}")
        for extra in issues.extra_mcps:
            emit_info(f"Custom MCP server {extra['name']}")
        if added:
            emit_success(f"Added {added} missing entries")

    return args.fix or not (issues.missing_agents or issues.missing_mcps)


# =============================================================================
# Parser and entry points
# =============================================================================


def _add_model_source_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--models",
        type=_model_list_arg,
        default=None,
        help="Comma-separated available model ids (skips running opencode)",
    )
    parser.add_argument("--config", default=None, help="Config file (default: oh-my-opencode.json)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="omo-config",
        description="Oh My Opencode agent model configuration",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--json", action="store_true", help="Machine-readable output")
    subparsers = parser.add_subparsers(dest="command")

    p = subparsers.add_parser("resolve", help="Resolve the model for an agent or category")
    p.add_argument("name")
    p.add_argument("--ui-model", default=None, help="Model selected in the opencode UI")
    _add_model_source_args(p)
    p.set_defaults(handler=handle_resolve)

    p = subparsers.add_parser("validate", help="Validate agents and categories")
    p.add_argument("names", nargs="*")
    _add_model_source_args(p)
    p.set_defaults(handler=handle_validate)

    p = subparsers.add_parser("agents", help="Show resolved models for all agents")
    p.add_argument("--ui-model", default=None, help="Model selected in the opencode UI")
    _add_model_source_args(p)
    p.set_defaults(handler=handle_agents)

    p = subparsers.add_parser("categories", help="Show resolved models for all categories")
    _add_model_source_args(p)
    p.set_defaults(handler=handle_categories)

    p = subparsers.add_parser("models", help="List available models")
    p.add_argument("--provider", default=None)
    _add_model_source_args(p)
    p.set_defaults(handler=handle_models)

    p = subparsers.add_parser("recommend", help="Recommend models for an agent")
    p.add_argument("agent")
    p.add_argument("--limit", type=int, default=None)
    _add_model_source_args(p)
    p.set_defaults(handler=handle_recommend)

    p = subparsers.add_parser("set", help="Assign a model to an agent or category")
    p.add_argument("name")
    p.add_argument("model")
    p.add_argument("--variant", default=None)
    p.add_argument("--no-check", action="store_true", help="Skip the availability check")
    _add_model_source_args(p)
    p.set_defaults(handler=handle_set)

    p = subparsers.add_parser("apply-category", help="Tag an agent with a category")
    p.add_argument("agent")
    p.add_argument("category")
    p.add_argument("--config", default=None, help="Config file (default: oh-my-opencode.json)")
    p.set_defaults(handler=handle_apply_category)

    p = subparsers.add_parser("optimize", help="Pin every agent to its best available model")
    p.add_argument(
        "--by-score",
        action="store_true",
        help="Rank by recommendation score instead of the fallback chains",
    )
    p.add_argument("--dry-run", action="store_true", help="Show the changes without writing")
    _add_model_source_args(p)
    p.set_defaults(handler=handle_optimize)

    p = subparsers.add_parser("profiles", help="Manage configuration profiles")
    p.add_argument("--config", default=None, help="Config file (default: oh-my-opencode.json)")
    actions = p.add_subparsers(dest="profiles_action", required=True)
    actions.add_parser("list")
    actions.add_parser("init")
    a = actions.add_parser("save")
    a.add_argument("name")
    a.add_argument("--description", default=None)
    for action in ("activate", "delete"):
        actions.add_parser(action).add_argument("name")
    a = actions.add_parser("rename")
    a.add_argument("old_name")
    a.add_argument("new_name")
    a = actions.add_parser("export")
    a.add_argument("name")
    a.add_argument("dest")
    a = actions.add_parser("import")
    a.add_argument("source")
    a.add_argument("name")
    a.add_argument("--description", default=None)
    p.set_defaults(handler=handle_profiles)

    p = subparsers.add_parser("migrate", help="Migrate the config to categories")
    p.set_defaults(handler=handle_migrate)

    p = subparsers.add_parser("check", help="Check the config against the defaults")
    p.add_argument("--fix", action="store_true", help="Add missing agents and MCP servers")
    p.add_argument("--config", default=None, help="Config file (default: oh-my-opencode.json)")
    p.set_defaults(handler=handle_check)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handler: Optional[Callable[[argparse.Namespace], bool]] = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return EXIT_ERROR

    try:
        return EXIT_OK if handler(args) else EXIT_FAILED
    except OmoConfigError as e:
        from omo_config.messaging import emit_error

        emit_error(str(e))
        return EXIT_ERROR


def main_entry():
    """Entry point for the installed CLI tool."""
    sys.exit(main())
