"""Command line interface.

Usage::

    nodeforge init --name my-app --template vanilla --features auth testing
    nodeforge new api --name my-api --profile enterprise
    nodeforge templates

``python -m nodeforge`` is equivalent.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, get_args

from nodeforge import __version__
from nodeforge.config import Settings, build_config
from nodeforge.errors import GenerationError, ProjectValidationError
from nodeforge.logger import get_logger, setup_logging
from nodeforge.pipeline import CreateProjectFlow
from nodeforge.registries import Architecture, DatabaseKind, FrontendKind, Profile
from nodeforge.utils import console, print_error

logger = get_logger(__name__)

PROJECT_TYPES = ("api", "web", "fullstack")

TEMPLATE_EXAMPLES: tuple[tuple[str, str], ...] = (
    ("Vanilla frontend + Express API", "nodeforge init --name app --template vanilla"),
    ("Vue + Express", "nodeforge init --name app --template vue"),
    ("React + Express", "nodeforge init --name app --template react"),
    ("Next.js + Express", "nodeforge init --name app --template next"),
    ("Angular + Express", "nodeforge init --name app --template angular"),
    ("Backend API only", "nodeforge init --name api --backend-only"),
    ("JavaScript API with PostgreSQL", "nodeforge init --name api --backend-only --javascript --database postgres"),
    ("API startup profile", "nodeforge new api --name api --profile startup"),
    ("API enterprise profile", "nodeforge new api --name api --profile enterprise"),
    ("API microservice profile", "nodeforge new api --name api --profile microservice"),
)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--name", "-n", default=None, help="Project name (required)")
    parser.add_argument(
        "--javascript", "-js",
        action="store_true",
        help="Use JavaScript for the backend (default: TypeScript)",
    )
    parser.add_argument(
        "--database", "-d",
        choices=get_args(DatabaseKind),
        default="none",
        help="Database (default: none)",
    )
    parser.add_argument("--port", "-p", default="3000", help="Backend port (default: 3000)")
    parser.add_argument("--description", default=None, help="Project description")
    parser.add_argument("--no-install", action="store_true", help="Skip npm install")
    parser.add_argument("--no-git", action="store_true", help="Skip git init")
    parser.add_argument(
        "--run-tests",
        action="store_true",
        help="Run the backend tests after generation",
    )
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Start the backend dev server in the background after generation",
    )
    parser.add_argument("--open", action="store_true", help="Open the project in VS Code")
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output directory (default: $NODEFORGE_OUTPUT_DIR or the current directory)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nodeforge",
        description="nodeforge -- generate Node.js backend and frontend projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  nodeforge init --name my-app --template vanilla --features auth testing\n"
            "  nodeforge new api --name my-api --profile enterprise\n"
            "  nodeforge templates\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser("init", help="Create a project from explicit options")
    _add_common_arguments(init)
    init.add_argument(
        "--template", "-t",
        choices=[kind for kind in get_args(FrontendKind) if kind != "none"],
        default="vanilla",
        help="Frontend template (default: vanilla)",
    )
    init.add_argument("--backend-only", "-b", action="store_true", help="Create the backend only")
    init.add_argument(
        "--features", "-f",
        nargs="+",
        default=[],
        help="Feature flags, space or comma separated (auth database docs ...)",
    )
    init.add_argument(
        "--architecture", "-a",
        choices=get_args(Architecture),
        default="mvc",
        help="Backend architecture (default: mvc)",
    )
    init.add_argument("--docker", action="store_true", help="Add Docker configuration")
    init.add_argument("--ci", action="store_true", help="Add a GitHub Actions workflow")

    new = subparsers.add_parser("new", help="Create a project from a type and profile")
    new.add_argument("type", choices=PROJECT_TYPES, help="Project type")
    _add_common_arguments(new)
    new.add_argument(
        "--profile",
        choices=get_args(Profile),
        default="startup",
        help="Feature profile (default: startup)",
    )

    subparsers.add_parser("templates", help="List example invocations")
    return parser


# ---------------------------------------------------------------------------
# Namespace -> ProjectConfig
# ---------------------------------------------------------------------------


def _split_features(values: list[str]) -> str:
    parts = [part.strip() for value in values for part in value.split(",")]
    return ",".join(part for part in parts if part)


def _post_actions(args: argparse.Namespace) -> list[str]:
    flags = (("test", args.run_tests), ("dev", args.dev), ("vscode", args.open))
    return [action for action, enabled in flags if enabled]


def config_kwargs(args: argparse.Namespace) -> dict[str, Any]:
    """Translate parsed arguments into ``ProjectConfig`` keyword arguments."""
    kwargs: dict[str, Any] = {
        "name": args.name or "",
        "backend_lang": "JavaScript" if args.javascript else "TypeScript",
        "database": args.database,
        "port": args.port,
        "git_init": not args.no_git,
        "install_deps": not args.no_install,
        "run_after_create": _post_actions(args),
    }
    if args.command == "init":
        kwargs.update(
            frontend="none" if args.backend_only else args.template,
            architecture=args.architecture,
            features=_split_features(args.features),
            docker=args.docker,
            ci=args.ci,
            description=args.description or "Generated with nodeforge",
        )
    else:
        kwargs.update(
            frontend="none" if args.type == "api" else "vanilla",
            profile=args.profile,
            docker=True,
            ci=True,
            description=args.description or f"Generated with nodeforge - {args.type} {args.profile}",
        )
    return kwargs


def list_templates() -> None:
    console.print("[bold cyan]Available templates[/bold cyan]\n")
    for title, command in TEMPLATE_EXAMPLES:
        console.print(f"[bold]{title}[/bold]")
        console.print(f"  [dim]{command}[/dim]\n")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``nodeforge`` and ``python -m nodeforge``.

    Returns:
        Process exit status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "templates":
        list_templates()
        return 0

    settings = Settings.from_env()
    if args.output:
        settings = settings.model_copy(update={"output_dir": Path(args.output)})
    setup_logging(verbose=args.verbose, level=settings.log_level)

    try:
        config = build_config(**config_kwargs(args))
        asyncio.run(CreateProjectFlow(config, settings).run())
    except ProjectValidationError as exc:
        print_error(f"Invalid project: {exc}")
        return 1
    except GenerationError as exc:
        print_error(str(exc))
        return 1
    except KeyboardInterrupt:
        print_error("Aborted.")
        return 130
    except Exception:
        logger.debug("unexpected failure", exc_info=True)
        print_error("Failed to create project: an unexpected error occurred (use --verbose for details)")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
