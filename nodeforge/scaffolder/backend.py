"""Backend service generation.

Given a ``ProjectConfig``, ``BackendGenerator`` writes ``<root>/backend``:
directory tree, ``package.json``, tool config files, env files, the Express
entry point with its optional modules, the todo demonstration resource,
tests and Docker files.  Each step is a separate coroutine awaited in order.

Filesystem and template errors propagate unchanged; the composer turns them
into ``GenerationError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from nodeforge.config import ProjectConfig
from nodeforge.logger import get_logger
from nodeforge.utils import ProgressSink, null_progress, write_json, write_text

from .docker_gen import DockerGenerator
from .env import build_env_file
from .layout import create_directories, plan_directories
from .manifest import build_manifest
from .templates import TemplateRenderer

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Source file table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SourceFile:
    """One rendered backend source file.

    ``stem`` is the output path without extension; the template lives at
    ``backend/<ext>/<stem>.<ext>.j2``.
    """

    stem: str
    when: Callable[[ProjectConfig], bool] = lambda config: True


SOURCE_FILES: tuple[SourceFile, ...] = (
    SourceFile("src/server"),
    SourceFile("src/config/logger", lambda c: c.has("logging")),
    SourceFile("src/middlewares/requestLogger", lambda c: c.has("logging")),
    SourceFile("src/config/database", lambda c: c.has_database),
    SourceFile("src/middlewares/auth", lambda c: c.has("auth")),
    SourceFile("src/validators/todo.validator", lambda c: c.has("validation")),
    SourceFile("src/config/swagger", lambda c: c.has("docs")),
    SourceFile("src/config/tracing", lambda c: c.has("opentelemetry")),
    SourceFile("src/models/todo.model"),
    SourceFile("src/services/todo.service"),
    SourceFile("src/controllers/todo.controller"),
    SourceFile("src/routes/todo.routes"),
)

TEST_FILES: tuple[str, ...] = (
    "tests/unit/todo.service.test",
    "tests/integration/todo.api.test",
)

GITIGNORE = """\
# Dependencies
node_modules/

# Build output
dist/
build/
coverage/

# Environment
.env
.env.local

# Logs
logs/
*.log
npm-debug.log*

# Databases
database/*.sqlite

# IDE / OS
.vscode/
.idea/
.DS_Store
Thumbs.db
"""


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


def build_context(config: ProjectConfig) -> dict[str, Any]:
    """Build the Jinja2 template context for backend templates."""
    logging_on = config.has("logging")
    spec = config.database_spec
    database_url = ""
    if spec is not None:
        database_url = spec.connection_url(
            config.database_name if spec.has_server else config.name
        )
    return {
        "project_name": config.name,
        "description": config.description,
        "port": config.port,
        "is_ts": config.is_typescript,
        "ext": config.ext,
        "logging": logging_on,
        "rate_limit": config.has("rateLimit"),
        "auth": config.has("auth"),
        "validation": config.has("validation"),
        "docs": config.has("docs"),
        "metrics": config.has("metrics"),
        "opentelemetry": config.has("opentelemetry"),
        "graceful_shutdown": config.has("graceful-shutdown"),
        "healthcheck": config.has("healthcheck"),
        "test_framework": config.test_framework,
        "database": config.database,
        "has_database": config.has_database,
        "database_name": config.database_name,
        "database_url": database_url,
        "has_frontend": config.has_frontend,
        "frontend": config.frontend,
        "frontend_port": config.frontend_port,
        "cors_origin": config.cors_origin,
        "log_info": "logger.info" if logging_on else "console.log",
        "log_warn": "logger.warn" if logging_on else "console.warn",
        "log_error": "logger.error" if logging_on else "console.error",
    }


# ---------------------------------------------------------------------------
# Tool config documents
# ---------------------------------------------------------------------------


def tsconfig(config: ProjectConfig) -> dict[str, Any]:
    return {
        "compilerOptions": {
            "target": "ES2020",
            "module": "commonjs",
            "lib": ["ES2020"],
            "outDir": "./dist",
            "strict": True,
            "esModuleInterop": True,
            "skipLibCheck": True,
            "forceConsistentCasingInFileNames": True,
            "resolveJsonModule": True,
            "sourceMap": True,
        },
        "include": ["src/**/*"],
        "exclude": ["node_modules", "dist", "tests"],
    }


def nodemon_config(config: ProjectConfig) -> dict[str, Any]:
    if config.is_typescript:
        return {
            "watch": ["src"],
            "ext": "ts,json",
            "ignore": ["src/**/*.test.ts"],
            "exec": "ts-node src/server.ts",
        }
    return {
        "watch": ["src"],
        "ext": "js,json",
        "ignore": ["src/**/*.test.js"],
        "exec": "node src/server.js",
    }


def eslint_config(config: ProjectConfig) -> dict[str, Any]:
    env = {"node": True, "es2021": True}
    if config.test_framework == "jest":
        env["jest"] = True
    if config.is_typescript:
        return {
            "root": True,
            "parser": "@typescript-eslint/parser",
            "plugins": ["@typescript-eslint"],
            "extends": [
                "eslint:recommended",
                "plugin:@typescript-eslint/recommended",
                "prettier",
            ],
            "env": env,
            "parserOptions": {"ecmaVersion": 2021, "sourceType": "module"},
            "rules": {"@typescript-eslint/no-explicit-any": "warn"},
        }
    return {
        "root": True,
        "extends": ["eslint:recommended", "prettier"],
        "env": env,
        "parserOptions": {"ecmaVersion": 2021, "sourceType": "commonjs"},
        "rules": {},
    }


PRETTIER_CONFIG: dict[str, Any] = {
    "semi": True,
    "singleQuote": True,
    "trailingComma": "es5",
    "printWidth": 100,
    "tabWidth": 2,
}


# ---------------------------------------------------------------------------
# BackendGenerator
# ---------------------------------------------------------------------------


class BackendGenerator:
    """Writes the Node.js backend service for one ``ProjectConfig``."""

    def __init__(
        self,
        config: ProjectConfig,
        renderer: TemplateRenderer | None = None,
        progress: ProgressSink = null_progress,
    ) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()
        self.docker_gen = DockerGenerator(self.renderer)
        self.progress = progress

    # -- Public API --------------------------------------------------------

    async def generate(self, project_root: Path) -> Path:
        """Generate the backend under ``<project_root>/backend``.

        Returns:
            Path to the backend directory.
        """
        backend = Path(project_root) / "backend"
        context = build_context(self.config)

        self.progress("Creating backend directories")
        await create_directories(backend, plan_directories(self.config))

        self.progress("Writing package.json")
        await self._write_manifest(backend)

        self.progress("Writing configuration files")
        await self._write_config_files(backend)

        self.progress("Writing environment files")
        await self._write_env_files(backend)

        self.progress(f"Rendering {self.config.backend_lang} sources")
        await self._render_sources(backend, context)

        if self.config.test_framework is not None:
            self.progress(f"Adding {self.config.test_framework} tests")
            await self._render_tests(backend, context)

        if self.config.wants_docker:
            self.progress("Adding Docker configuration")
            await self.docker_gen.generate_all(backend, self.config, context)

        logger.info("backend generated at %s", backend)
        return backend

    # -- Steps -------------------------------------------------------------

    async def _write_manifest(self, backend: Path) -> None:
        manifest = build_manifest(self.config)
        await write_json(backend / "package.json", manifest.to_package_json())

    async def _write_config_files(self, backend: Path) -> None:
        if self.config.is_typescript:
            await write_json(backend / "tsconfig.json", tsconfig(self.config))
        await write_json(backend / "nodemon.json", nodemon_config(self.config))
        await write_json(backend / ".eslintrc.json", eslint_config(self.config))
        await write_json(backend / ".prettierrc", PRETTIER_CONFIG)
        await write_text(backend / ".gitignore", GITIGNORE)

    async def _write_env_files(self, backend: Path) -> None:
        env_file = build_env_file(self.config)
        await write_text(backend / ".env.example", env_file.render())
        await write_text(backend / ".env", "")

    async def _render_sources(self, backend: Path, context: dict[str, Any]) -> None:
        ext = self.config.ext
        for source in SOURCE_FILES:
            if not source.when(self.config):
                continue
            await self.renderer.render_to_file(
                f"backend/{ext}/{source.stem}.{ext}.j2",
                backend / f"{source.stem}.{ext}",
                context,
            )

    async def _render_tests(self, backend: Path, context: dict[str, Any]) -> None:
        ext = self.config.ext
        for stem in TEST_FILES:
            await self.renderer.render_to_file(
                f"backend/{ext}/{stem}.{ext}.j2",
                backend / f"{stem}.{ext}",
                context,
            )

        if self.config.test_framework == "vitest":
            config_name = "vitest.config.ts" if self.config.is_typescript else "vitest.config.mjs"
            template = f"backend/{ext}/{config_name}.j2"
        else:
            config_name = "jest.config.js"
            template = "backend/shared/jest.config.js.j2"
        await self.renderer.render_to_file(template, backend / config_name, context)
