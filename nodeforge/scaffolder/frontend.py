"""Frontend application generation.

Dispatches on ``FRONTEND_CAPABILITIES``: the vanilla client is generated in
full, every framework gets a manifest plus a README describing the pending
scaffolding.  A stub is reported through ``FrontendResult.status`` and the
progress sink, so callers can always tell what was produced.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional

from nodeforge.config import ProjectConfig
from nodeforge.logger import get_logger
from nodeforge.registries import (
    FRONTEND_CAPABILITIES,
    FRONTEND_LABELS,
    FRONTEND_MANIFESTS,
    SUPPORTED,
)
from nodeforge.utils import ProgressSink, null_progress, write_json

from .manifest import ManifestDescriptor
from .templates import TemplateRenderer

logger = get_logger(__name__)

FrontendStatus = Literal["supported", "stub", "skipped"]

LIVE_SERVER_VERSION = "^1.2.2"


@dataclass(frozen=True)
class FrontendResult:
    """Outcome of frontend generation."""

    status: FrontendStatus
    path: Optional[Path] = None
    notice: Optional[str] = None


class FrontendGenerator:
    """Writes ``<root>/frontend`` for the configured framework."""

    def __init__(
        self,
        config: ProjectConfig,
        renderer: TemplateRenderer | None = None,
        progress: ProgressSink = null_progress,
    ) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()
        self.progress = progress

    def _context(self) -> dict[str, Any]:
        return {
            "project_name": self.config.name,
            "description": self.config.description,
            "frontend": self.config.frontend,
            "frontend_label": FRONTEND_LABELS[self.config.frontend],
            "frontend_port": self.config.frontend_port,
            "api_base_url": self.config.api_base_url,
        }

    async def generate(self, project_root: Path) -> FrontendResult:
        """Generate the frontend, or skip when the project has none."""
        if not self.config.has_frontend:
            logger.debug("no frontend configured")
            return FrontendResult(status="skipped")

        frontend_dir = Path(project_root) / "frontend"
        context = self._context()

        if FRONTEND_CAPABILITIES[self.config.frontend] == SUPPORTED:
            self.progress(f"Generating {context['frontend_label']} frontend")
            await self._generate_vanilla(frontend_dir, context)
            logger.info("frontend generated at %s", frontend_dir)
            return FrontendResult(status="supported", path=frontend_dir)

        notice = (
            f"{context['frontend_label']} frontend is not fully scaffolded yet: "
            f"only package.json and README.md were written to {frontend_dir}"
        )
        self.progress(f"Warning: {notice}")
        await self._generate_stub(frontend_dir, context)
        logger.warning(notice)
        return FrontendResult(status="stub", path=frontend_dir, notice=notice)

    # -- Vanilla -----------------------------------------------------------

    def vanilla_manifest(self) -> ManifestDescriptor:
        port = self.config.frontend_port
        return ManifestDescriptor(
            name=f"{self.config.package_name}-frontend",
            description=f"{self.config.description} - frontend",
            private=True,
            scripts={"start": f"live-server --port={port}"},
            dev_dependencies={"live-server": LIVE_SERVER_VERSION},
            keywords=["frontend", "vanilla"],
        )

    async def _generate_vanilla(self, frontend_dir: Path, context: dict[str, Any]) -> None:
        await write_json(frontend_dir / "package.json", self.vanilla_manifest().to_package_json())
        await self.renderer.render_to_file(
            "frontend/vanilla/index.html.j2", frontend_dir / "index.html", context
        )
        await self.renderer.render_to_file(
            "frontend/vanilla/README.md.j2", frontend_dir / "README.md", context
        )

    # -- Framework stubs ---------------------------------------------------

    def stub_manifest(self) -> ManifestDescriptor:
        spec = FRONTEND_MANIFESTS[self.config.frontend]
        return ManifestDescriptor(
            name=f"{self.config.package_name}-frontend",
            description=f"{self.config.description} - frontend",
            private=True,
            scripts=dict(spec.scripts),
            dependencies=dict(spec.dependencies),
            dev_dependencies=dict(spec.dev_dependencies),
            keywords=["frontend", self.config.frontend],
        )

    async def _generate_stub(self, frontend_dir: Path, context: dict[str, Any]) -> None:
        await write_json(frontend_dir / "package.json", self.stub_manifest().to_package_json())
        await self.renderer.render_to_file(
            "frontend/stub/README.md.j2", frontend_dir / "README.md", context
        )
