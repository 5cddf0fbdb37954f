#!/usr/bin/env python3
"""
CLI for inspecting and stepping through a gated flow
"""

import argparse
import json
import sys
import logging
from typing import List, Optional

from pydantic import ValidationError

from dag import DagError, draw_flow
from flow.runtime import FlowRuntime, create_runtime
from flow.settings import Settings
from storage.flag_store import parse_bool


def setup_logging(verbose: bool = False, log_file: Optional[str] = None, level: str = "INFO"):
    """Setup logging configuration"""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True,
    )


def parse_assignment(raw: str) -> tuple:
    """Parse ``NAME=BOOL``"""
    name, sep, value = raw.partition("=")
    if not sep or not name.strip():
        raise ValueError(f"expected NAME=BOOL, got {raw!r}")
    return name.strip(), parse_bool(value)


def print_flow_state(runtime: FlowRuntime):
    snapshot = runtime.resolver.describe()
    print(f"\n Flow: {runtime.flow_def.name}")
    print(f"   Order: {' -> '.join(snapshot.order)}")
    for step in snapshot.steps:
        mark = "✅" if step.ready else ("⏳" if step.condition_met else "❌")
        print(f"   {mark} {step.id} ({step.payload})")
    print(f"   Next: {snapshot.next_destination}")


def validate_only(settings: Settings) -> bool:
    """Validate configuration without entering the loop"""
    try:
        runtime = create_runtime(settings)
    except (OSError, json.JSONDecodeError, ValidationError, ValueError, DagError) as e:
        print(f"❌ Configuration validation failed: {e}")
        return False

    report = runtime.resolver.manager.validate()
    for w in report.warnings:
        print(f"⚠️ {w}")
    for e in report.errors:
        print(f"❌ {e}")
    if report.ok:
        print("✅ Configuration validation completed successfully!")
        print(f"   Total steps: {len(runtime.flow_def.steps)}")
    return report.ok


def run_interactive(runtime: FlowRuntime):
    resolver = runtime.resolver
    store = runtime.store

    print("\n" + "=" * 60)
    print("Commands:")
    print("   - 'next': show the next step")
    print("   - 'set <flag> <bool>': change a flag")
    print("   - 'can <destination>': check whether a destination is reachable")
    print("   - 'graph': print the dependency tree")
    print("   - 'flags': list stored flags")
    print("   - 'quit', 'exit', 'q': exit")
    print("=" * 60)
    print(f"Start: {resolver.next_step()}")

    while True:
        try:
            parts = input("\n flow> ").strip().split()
        except (KeyboardInterrupt, EOFError):
            print("\n")
            break

        if not parts:
            continue
        cmd, args = parts[0].lower(), parts[1:]

        if cmd in ("quit", "exit", "q"):
            break
        elif cmd == "next":
            print(resolver.next_step())
        elif cmd == "set" and len(args) == 2:
            try:
                store.set(args[0], parse_bool(args[1]))
            except ValueError as e:
                print(f"❌ {e}")
                continue
            print(f"{args[0]} = {store.get(args[0])}, next: {resolver.next_step()}")
        elif cmd == "can" and len(args) == 1:
            print("reachable" if resolver.can_reach(args[0]) else "blocked")
        elif cmd == "graph":
            print(resolver.render_graph())
        elif cmd == "flags":
            for name, value in sorted(store.all().items()):
                print(f"   {name}: {value}")
        else:
            print(f"Unknown command: {' '.join(parts)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Gated flow resolver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Built-in onboarding flow, interactive
  flowctl

  # Validation only
  flowctl --config config/onboarding_flow.json --validate-only

  # One-shot query
  flowctl --set privacy_policy_agreed=true --can-reach main --print-graph
        """
    )

    parser.add_argument('--config', help='Path to a flow JSON definition (default: built-in onboarding flow)')
    parser.add_argument('--redis', action='store_true', help='Use Redis for flag storage (default: in-memory)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')
    parser.add_argument('--validate-only', action='store_true', help='Validate the flow and exit')
    parser.add_argument('--print-graph', action='store_true', help='Print the dependency tree and exit')
    parser.add_argument('--set', dest='assignments', action='append', default=[], metavar='NAME=BOOL',
                        help='Set a flag before resolving (repeatable)')
    parser.add_argument('--can-reach', metavar='DEST', help='Check whether DEST is reachable and exit')
    parser.add_argument('--visualize', metavar='PNG', help='Draw the flow graph to PNG and exit')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function"""
    args = build_parser().parse_args(argv)

    settings = Settings.from_env()
    if args.config:
        settings.flow_config = args.config
    if args.redis:
        settings.use_redis = True

    setup_logging(args.verbose, settings.log_file, settings.log_level)
    logger = logging.getLogger(__name__)

    if args.validate_only:
        return 0 if validate_only(settings) else 1

    try:
        runtime = create_runtime(settings)
    except FileNotFoundError as e:
        print(f"File not found: {e}")
        return 1
    except json.JSONDecodeError as e:
        print(f"Invalid JSON: {e}")
        return 1
    except (ValidationError, ValueError, DagError) as e:
        logger.error(f"Initialization failed: {e}")
        print(f"Initialization failed: {e}")
        return 1

    try:
        for raw in args.assignments:
            name, value = parse_assignment(raw)
            runtime.store.set(name, value)
    except ValueError as e:
        print(f"❌ {e}")
        return 2

    one_shot = bool(args.assignments or args.print_graph or args.can_reach or args.visualize)

    if args.print_graph:
        print(runtime.resolver.render_graph())
    if args.visualize:
        if not draw_flow(runtime.resolver.manager, args.visualize):
            print("⚠️ Visualization skipped (matplotlib not installed)")
    if args.can_reach:
        reachable = runtime.resolver.can_reach(args.can_reach)
        print(f"{args.can_reach}: {'reachable' if reachable else 'blocked'}")
        return 0 if reachable else 3
    if one_shot:
        print_flow_state(runtime)
        return 0

    print_flow_state(runtime)
    run_interactive(runtime)
    return 0


if __name__ == "__main__":
    sys.exit(main())
