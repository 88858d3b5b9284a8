#!/usr/bin/env python3
"""
commonmkctl - shared build and operations targets

Run one or more targets, optionally overriding variables:

    commonmkctl docker-push DOCKER_REGISTRY=ghcr.io/acme
    commonmkctl pg-describe TABLE=users
"""
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from commonmk.config import PROJECT_FILE, Variables, load_project_file, parse_assignments
from commonmk.errors import CommonMkError, ConfigError
from commonmk.exec import CommandExecutor
from commonmk.runner import TargetRunner
from commonmk.targets import TaskContext, build_registry

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='commonmkctl',
        description='Shared build, container and database targets',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Run 'commonmkctl help' to list targets.",
    )

    parser.add_argument(
        'words',
        nargs='*',
        metavar='TARGET|VAR=value',
        help='Targets to run and variable assignments (default target: help)'
    )

    parser.add_argument(
        '-f', '--file',
        default=os.environ.get('COMMONMK_FILE'),
        help=f'Project file (default: $COMMONMK_FILE or ./{PROJECT_FILE})'
    )

    parser.add_argument(
        '-C', '--directory',
        help='Change to this directory before doing anything'
    )

    parser.add_argument(
        '-n', '--dry-run',
        action='store_true',
        help='Print the commands that would run without running them'
    )

    parser.add_argument(
        '-l', '--list',
        action='store_true',
        help='List every target name, including undocumented ones'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )


def format_error(error: CommonMkError) -> str:
    message = str(error)
    if message.startswith(("Error:", "Usage:")):
        return message
    return f"Error: {message}"


def run(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run the requested targets and return the exit code."""
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)
    configure_logging(args.verbose)

    cwd = Path(args.directory).resolve() if args.directory else Path.cwd()
    if not cwd.is_dir():
        print(format_error(ConfigError(f"Directory not found: {cwd}")), file=sys.stderr)
        return ConfigError.exit_code
    project_path = Path(args.file) if args.file else cwd / PROJECT_FILE
    if not project_path.is_absolute():
        project_path = cwd / project_path

    try:
        project = load_project_file(project_path)
        names, assignments = parse_assignments(args.words)

        registry = build_registry(project['targets'])

        if args.list:
            for name in registry.names():
                print(name)
            return 0

        variables = Variables(project=project['variables'], overrides=assignments, cwd=cwd)
        context = TaskContext(
            vars=variables,
            executor=CommandExecutor(cwd=cwd, dry_run=args.dry_run),
            gate_on_init=project['gate_on_init'],
        )
        TargetRunner(registry, context).run(names)

    except CommonMkError as e:
        print(format_error(e), file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130

    return 0


def main():
    """Main CLI entry point."""
    sys.exit(run())


if __name__ == '__main__':
    main()
