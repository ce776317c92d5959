"""Root composer: builds the whole project tree for one configuration.

Order is fixed and strictly sequential: project root, backend, frontend,
aggregate README, CI workflow, persisted configuration.  Every filesystem
and template failure is converted into a single ``GenerationError`` here,
tagged with the step that was running.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from jinja2 import TemplateError
from pydantic import ValidationError

from nodeforge.config import DEFAULT_CONFIG_FILENAME, ProjectConfig
from nodeforge.errors import GenerationError, ProjectValidationError
from nodeforge.logger import get_logger
from nodeforge.registries import FRONTEND_LABELS, FRONTEND_MANIFESTS
from nodeforge.utils import ProgressSink, null_progress

from .backend import BackendGenerator
from .frontend import FrontendGenerator, FrontendStatus
from .templates import TemplateRenderer

logger = get_logger(__name__)

# README feature matrix rows: (label, feature flag)
FEATURE_MATRIX: tuple[tuple[str, str], ...] = (
    ("Authentication (JWT)", "auth"),
    ("Structured logging", "logging"),
    ("Request validation", "validation"),
    ("Rate limiting", "rateLimit"),
    ("API docs (Swagger)", "docs"),
    ("Automated tests", "testing"),
    ("Graceful shutdown", "graceful-shutdown"),
    ("Docker health check", "healthcheck"),
    ("Prometheus metrics", "metrics"),
    ("OpenTelemetry tracing", "opentelemetry"),
)


@dataclass
class GenerationResult:
    """What a successful ``ProjectComposer.generate`` call produced."""

    root: Path
    backend: Path
    frontend: Optional[Path]
    frontend_status: FrontendStatus
    config_file: Path
    notices: list[str] = field(default_factory=list)


class ProjectComposer:
    """Creates ``<output_dir>/<name>`` and runs every generator in order."""

    def __init__(
        self,
        config: ProjectConfig,
        progress: ProgressSink = null_progress,
        renderer: TemplateRenderer | None = None,
        config_filename: str = DEFAULT_CONFIG_FILENAME,
    ) -> None:
        self.config = config
        self.progress = progress
        self.renderer = renderer or TemplateRenderer()
        self.config_filename = config_filename
        self._step = "setup"

    async def generate(self, output_dir: str | Path) -> GenerationResult:
        """Generate the complete project under *output_dir*.

        Raises:
            ProjectValidationError: If the project directory already exists.
                Nothing is written in that case.
            GenerationError: On any filesystem or template failure.  The
                partially written tree is left in place.
        """
        root = Path(output_dir) / self.config.name
        try:
            await asyncio.to_thread(root.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(root.mkdir)
        except FileExistsError:
            raise ProjectValidationError(
                "name", f'Directory "{self.config.name}" already exists'
            ) from None
        except OSError as exc:
            raise GenerationError("project root", str(exc)) from exc

        try:
            return await self._generate_into(root)
        except (OSError, TemplateError, ValidationError, ValueError) as exc:
            logger.debug("generation failed during %s", self._step, exc_info=True)
            raise GenerationError(self._step, str(exc)) from exc

    # -- Steps -------------------------------------------------------------

    async def _generate_into(self, root: Path) -> GenerationResult:
        self._step = "backend"
        backend = await BackendGenerator(self.config, self.renderer, self.progress).generate(root)

        self._step = "frontend"
        frontend = await FrontendGenerator(self.config, self.renderer, self.progress).generate(root)
        notices = [frontend.notice] if frontend.notice else []

        self._step = "readme"
        self.progress("Writing project README")
        await self.renderer.render_to_file(
            "root/README.md.j2", root / "README.md", self.readme_context(frontend.status)
        )

        if self.config.wants_ci:
            self._step = "ci"
            self.progress("Writing CI workflow")
            await self.renderer.render_to_file(
                "root/ci.yml.j2",
                root / ".github" / "workflows" / "ci.yml",
                self.ci_context(),
            )

        self._step = "config"
        self.progress("Saving project configuration")
        config_file = await asyncio.to_thread(self.config.save, root, self.config_filename)

        logger.info("project generated at %s", root)
        return GenerationResult(
            root=root,
            backend=backend,
            frontend=frontend.path,
            frontend_status=frontend.status,
            config_file=config_file,
            notices=notices,
        )

    # -- Contexts ----------------------------------------------------------

    def readme_context(self, frontend_status: FrontendStatus) -> dict[str, Any]:
        config = self.config
        spec = config.database_spec
        start_script = "start"
        if config.frontend in FRONTEND_MANIFESTS and "dev" in FRONTEND_MANIFESTS[config.frontend].scripts:
            start_script = "dev"
        return {
            "project_name": config.name,
            "description": config.description,
            "backend_lang": config.backend_lang,
            "is_ts": config.is_typescript,
            "architecture": config.architecture,
            "port": config.port,
            "has_frontend": config.has_frontend,
            "frontend_label": FRONTEND_LABELS[config.frontend],
            "frontend_port": config.frontend_port,
            "frontend_start": start_script,
            "frontend_status": frontend_status,
            "frontend_features": config.frontend_features,
            "has_database": config.has_database,
            "database_label": spec.label if spec else "",
            "logging": config.has("logging"),
            "docs": config.has("docs"),
            "metrics": config.has("metrics"),
            "test_framework": config.test_framework,
            "docker": config.wants_docker,
            "image_name": f"{config.package_name}-backend",
            "ci": config.wants_ci,
            "config_filename": self.config_filename,
            "feature_matrix": [(label, config.has(flag)) for label, flag in FEATURE_MATRIX],
        }

    def ci_context(self) -> dict[str, Any]:
        test_jobs = ["test-backend"]
        if self.config.has_frontend:
            test_jobs.append("test-frontend")
        return {
            "image_name": f"{self.config.package_name}-backend",
            "has_frontend": self.config.has_frontend,
            "test_jobs": test_jobs,
        }
