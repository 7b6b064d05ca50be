"""
Main CLI entry point for mcp-skill-tool.

This module provides the command-line interface for keeping MCP server and
skill configuration in sync across AI coding tools. It supports:
- Discovering what each host has configured (list)
- Folding host configs into the unified spec (import)
- Pushing the unified spec back onto hosts (apply)
- Copying entries straight from one host to others (sync)
- Toggling, sanitizing and inspecting spec entries
- Dry-run mode for every write

Usage:
    python -m cli.main import --hosts claude-code,codex
    python -m cli.main apply --dry-run
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from adapters import default_adapters
from core.errors import ToolchainError
from core.models import ENTRY_KINDS, SCOPES, RemoteTransport
from core.orchestrator import ToolchainOrchestrator
from core.paths import HostEnvironment
from core.registry import HostRegistry
from core.spec_io import DEFAULT_SPEC_PATH


def split_csv(value: str) -> List[str]:
    """argparse type for comma-separated lists; blanks are dropped."""
    return [part.strip() for part in value.split(',') if part.strip()]


def create_parser() -> argparse.ArgumentParser:
    """
    Create argument parser for CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog='mcp-skill-tool',
        description='Sync MCP servers and skills across AI coding tools',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Collect every host's MCP servers into mcp-skill-tool.yaml
  %(prog)s import --print-notes

  # Preview what apply would write for two hosts
  %(prog)s --hosts claude-code,codex apply --dry-run

  # Copy one server from Claude Code to Gemini CLI
  %(prog)s sync --from claude-code --to gemini-cli --mcp db
        """
    )

    parser.add_argument(
        '--spec',
        default=DEFAULT_SPEC_PATH,
        help=f'Unified spec path, relative to the repo (default: {DEFAULT_SPEC_PATH})'
    )
    parser.add_argument(
        '--hosts',
        type=split_csv,
        default=None,
        help='Comma-separated host ids (default: all hosts)'
    )
    parser.add_argument(
        '--repo',
        help='Repository root (default: current directory)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output with detailed logging'
    )

    sub = parser.add_subparsers(dest='command', metavar='COMMAND')
    sub.required = True

    sub.add_parser('init', help='Create an empty spec and skills/ if missing')

    p = sub.add_parser('list', help='Show MCP servers and skills each host has configured')
    p.add_argument('--host', help='Only this host (overrides --hosts)')

    p = sub.add_parser('import', help='Merge host configs and repo skills into the unified spec')
    p.add_argument('--print-notes', action='store_true', help='Print per-host discovery notes')

    sub.add_parser('sanitize', help='Replace secret values in the unified spec with ${ENV} placeholders')
    sub.add_parser('status', help='Print the redacted spec and what each host would receive')

    for command, verb in (('enable', 'Enable'), ('disable', 'Disable')):
        p = sub.add_parser(command, help=f'{verb} a spec entry')
        p.add_argument('kind', choices=ENTRY_KINDS)
        p.add_argument('name')
        p.add_argument('--scope', choices=SCOPES, help='Required when the name exists in both scopes')

    p = sub.add_parser('apply', help='Write the unified spec into each host config')
    p.add_argument('--dry-run', action='store_true', help='Show what would be done without making changes')

    p = sub.add_parser('sync', help='Copy entries from one host to others (spec untouched)')
    p.add_argument('--from', dest='source', required=True, help='Source host id')
    p.add_argument('--to', dest='destinations', type=split_csv, required=True,
                   help='Comma-separated destination host ids')
    p.add_argument('--mcp', type=split_csv, default=None, help='Comma-separated server names')
    p.add_argument('--skills', type=split_csv, default=None, help='Comma-separated skill names')
    p.add_argument('--dest-scope', choices=SCOPES, default='repo',
                   help='Scope to install skills at (default: repo)')
    p.add_argument('--dry-run', action='store_true', help='Show what would be done without making changes')

    p = sub.add_parser('target-disable', help='Disable one entry directly in a host config')
    p.add_argument('--host', required=True, help='Host id')
    p.add_argument('--kind', required=True, choices=ENTRY_KINDS)
    p.add_argument('--name', required=True)
    p.add_argument('--scope', choices=SCOPES, help='Skill scope (default: repo)')
    p.add_argument('--dry-run', action='store_true', help='Show what would be done without making changes')

    return parser


def setup_registry() -> HostRegistry:
    """
    Initialize host registry with all available adapters.

    Returns:
        HostRegistry with registered adapters
    """
    registry = HostRegistry()
    for adapter in default_adapters():
        registry.register(adapter)
    return registry


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )


def _print_lines(lines: List[str]):
    for line in lines:
        print(line)


def cmd_init(orchestrator: ToolchainOrchestrator, args) -> int:
    shown = orchestrator.env.display(orchestrator.spec_path)
    if orchestrator.init():
        print(f"Created {shown}")
    else:
        print(f"{shown} already exists")
    return 0


def cmd_list(orchestrator: ToolchainOrchestrator, args) -> int:
    host_ids = [args.host] if args.host else args.hosts
    for adapter, result in orchestrator.discover(host_ids):
        print(f"{adapter.label} ({adapter.id}, {adapter.scope} scope)")
        for note in result.notes:
            print(f"  # {note}")
        for server in result.mcp_servers:
            target = server.transport.url if isinstance(server.transport, RemoteTransport) \
                else server.transport.command
            state = '' if server.enabled else ' (disabled)'
            print(f"  - {server.name} [{server.transport.kind}] {target}{state}")

    skills = orchestrator.discover_skills(host_ids)
    print("Skills:")
    if not skills:
        print("  (none)")
    for skill in skills:
        print(f"  - {skill.host} {skill.scope}:{skill.name} {orchestrator.env.display(skill.dir)}")
    return 0


def cmd_import(orchestrator: ToolchainOrchestrator, args) -> int:
    spec, notes = orchestrator.import_merge(args.hosts)
    if args.print_notes:
        _print_lines(notes)
    print(
        f"Updated {orchestrator.env.display(orchestrator.spec_path)}: "
        f"{len(spec.mcp_servers)} MCP server(s), {len(spec.skills)} skill(s)"
    )
    return 0


def cmd_sanitize(orchestrator: ToolchainOrchestrator, args) -> int:
    orchestrator.sanitize()
    print(f"Sanitized {orchestrator.env.display(orchestrator.spec_path)}")
    return 0


def cmd_status(orchestrator: ToolchainOrchestrator, args) -> int:
    print(json.dumps(orchestrator.status(args.hosts), indent=2))
    return 0


def cmd_toggle(orchestrator: ToolchainOrchestrator, args) -> int:
    enabled = args.command == 'enable'
    orchestrator.set_enabled(args.kind, args.name, enabled, args.scope)
    print(f"{'Enabled' if enabled else 'Disabled'} {args.kind} {args.name}")
    return 0


def cmd_apply(orchestrator: ToolchainOrchestrator, args) -> int:
    _print_lines(orchestrator.apply(args.hosts, dry_run=args.dry_run))
    return 0


def cmd_sync(orchestrator: ToolchainOrchestrator, args) -> int:
    _print_lines(orchestrator.sync(
        args.source,
        args.destinations,
        mcp_names=args.mcp,
        skill_names=args.skills,
        dest_scope=args.dest_scope,
        dry_run=args.dry_run,
    ))
    return 0


def cmd_target_disable(orchestrator: ToolchainOrchestrator, args) -> int:
    _print_lines(orchestrator.target_disable(
        args.host, args.kind, args.name, scope=args.scope, dry_run=args.dry_run
    ))
    return 0


COMMANDS = {
    'init': cmd_init,
    'list': cmd_list,
    'import': cmd_import,
    'sanitize': cmd_sanitize,
    'status': cmd_status,
    'enable': cmd_toggle,
    'disable': cmd_toggle,
    'apply': cmd_apply,
    'sync': cmd_sync,
    'target-disable': cmd_target_disable,
}


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        env = HostEnvironment.from_process(args.repo)
        orchestrator = ToolchainOrchestrator(env, setup_registry(), args.spec)
        return COMMANDS[args.command](orchestrator, args)

    except KeyboardInterrupt:
        print("\nCancelled by user", file=sys.stderr)
        return 1
    except (ToolchainError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc(file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
