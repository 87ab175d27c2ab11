"""Command-line entry point for ``ai-skeleton``.

Usage::

    ai-skeleton init my_app
    ai-skeleton init -n my_app -d "My service" -m example.com/my_app
    ai-skeleton init my_app --local
    python -m aiskel init my_app --template-url https://example.com/tpl.zip
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from pathlib import Path

from pydantic import ValidationError

from aiskel import __version__
from aiskel.config import ScaffoldConfig
from aiskel.prompts import collect_project_meta
from aiskel.renderer import ProjectMeta, RenderError, render_project
from aiskel.utils import (
    console,
    format_duration,
    print_error,
    print_step_header,
    print_success,
    print_summary_table,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-skeleton",
        description="AI Skeleton -- full-stack scaffold CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  ai-skeleton init my_app\n"
            "  ai-skeleton init -n my_app -d 'Demo service' -m example.com/my_app\n"
            "  ai-skeleton init my_app --local\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser(
        "init",
        help="Create a new project from the scaffold template",
        description=(
            "Create a new AI Skeleton project: collect project information, "
            "fetch the template and substitute the project's identifiers."
        ),
    )
    init.add_argument("project", nargs="?", default=None, help="Project name")
    init.add_argument("--name", "-n", default=None, help="Project name (overrides the positional)")
    init.add_argument("--desc", "-d", default=None, help="Project description")
    init.add_argument("--version", "-v", dest="project_version", default=None, help="Project version")
    init.add_argument("--module", "-m", default=None, help="Module path")
    init.add_argument(
        "--template-url",
        default=None,
        help="Custom template archive URL (e.g. a private repository export)",
    )
    init.add_argument(
        "--local",
        action="store_true",
        help="Use the scaffold checkout in the current or parent directory",
    )
    init.add_argument("--config", default=None, help="Path to a JSON configuration file")
    init.add_argument(
        "--output", "-o",
        default=".",
        help="Directory in which the project folder is created (default: .)",
    )
    init.add_argument(
        "--no-input",
        action="store_true",
        help="Never prompt; fail if the project name is missing",
    )
    init.set_defaults(handler=run_init)
    return parser


def load_config(args: argparse.Namespace) -> ScaffoldConfig:
    """Read the configuration file (if any) or the environment, then apply flags."""
    config = ScaffoldConfig.load(Path(args.config)) if args.config else ScaffoldConfig.from_env()
    if args.local:
        config.mode = "local"
    return config


def run_init(args: argparse.Namespace) -> int:
    try:
        config = load_config(args)
    except (OSError, ValidationError) as exc:
        print_error(f"Invalid configuration: {exc}")
        return 1

    try:
        meta = collect_project_meta(
            config,
            name=args.name or args.project,
            description=args.desc,
            version=args.project_version,
            module=args.module,
            template_url=args.template_url,
            interactive=not args.no_input,
        )
    except (ValueError, ValidationError) as exc:
        print_error(f"Invalid project information: {exc}")
        return 1

    _print_meta(meta)

    print_step_header("Generating project files")
    started = time.monotonic()
    try:
        project_path = asyncio.run(render_project(meta, config, args.output))
    except RenderError as exc:
        print_error(f"Failed to generate project: {exc}")
        return 1

    print_success(f"Project generated in {format_duration(time.monotonic() - started)}")
    _print_next_steps(project_path)
    return 0


def _print_meta(meta: ProjectMeta) -> None:
    print_summary_table(
        {
            "Name": meta.name,
            "Description": meta.description,
            "Version": meta.version,
            "Module": meta.module,
        },
        title="Project information",
    )


def _print_next_steps(project_path: Path) -> None:
    console.print()
    console.print("[bold]Next steps:[/bold]")
    console.print(f"  1. cd {project_path}")
    console.print("  2. Start the backend: make backend-dev")
    console.print("  3. Start the frontend: make frontend-dev")
    console.print("  4. Open http://localhost:5173")
    console.print()


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``ai-skeleton`` and ``python -m aiskel``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(args.handler(args))


if __name__ == "__main__":
    main()
