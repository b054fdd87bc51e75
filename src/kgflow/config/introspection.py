"""Configuration introspection for debugging resolution issues."""

import argparse
import json
import sys
from typing import Any

from kgflow.core.exceptions import ConfigurationError

from .api import resolve_config
from .types import ResolvedConfig

# ruff: noqa: T201


def get_config_warnings(resolved: ResolvedConfig) -> list[str]:
    """Non-fatal issues worth surfacing before a run."""
    values = resolved.values
    warnings = []
    if not values["gemini_api_key"]:
        warnings.append(
            "No Gemini API key configured - references will be scored heuristically"
        )
    if not values["search_api_key"]:
        warnings.append("No search credentials configured - notability checks will find no references")
    if values["daily_search_limit"] == 0:
        warnings.append("daily_search_limit is 0 - every notability check is rate limited")
    if str(values["target_environment"].value) == "production":
        warnings.append("Publishing targets the production knowledge base")
    return warnings


def get_config_info(profile: str | None = None) -> dict[str, Any]:
    """Structured configuration details for programmatic use."""
    try:
        resolved = resolve_config(profile=profile)
    except ConfigurationError as e:
        return {"status": "invalid", "error": str(e), "config": None, "sources": {}}
    return {
        "status": "valid",
        "config": {
            k: (v.value if hasattr(v, "value") else v)
            for k, v in resolved.redacted().items()
        },
        "sources": dict(resolved.origin),
        "warnings": get_config_warnings(resolved),
    }


def print_config_debug(*, profile: str | None = None, show_sources: bool = True) -> None:
    try:
        resolved = resolve_config(profile=profile)
    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        sys.exit(1)

    print("=== Effective Configuration ===")
    for field, value in resolved.redacted().items():
        shown = value.value if hasattr(value, "value") else value
        print(f"  {field}: {shown}")

    if show_sources:
        print("\n=== Configuration Sources ===")
        for field, source in resolved.origin.items():
            print(f"  {field}: {source}")

    warnings = get_config_warnings(resolved)
    if warnings:
        print("\nWarnings:")
        for warning in warnings:
            print(f"  - {warning}")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for configuration introspection."""
    parser = argparse.ArgumentParser(
        description="Inspect kgflow configuration", prog="python -m kgflow.config"
    )
    parser.add_argument("--profile", help="Configuration profile to use")
    parser.add_argument(
        "--no-sources", action="store_true", help="Don't show configuration sources"
    )
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only check that configuration is valid (exit code 0=valid, 1=invalid)",
    )
    args = parser.parse_args(argv)

    if args.check:
        info = get_config_info(profile=args.profile)
        sys.exit(0 if info["status"] == "valid" else 1)

    if args.json:
        print(json.dumps(get_config_info(profile=args.profile), indent=2))
    else:
        print_config_debug(profile=args.profile, show_sources=not args.no_sources)
