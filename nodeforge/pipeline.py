"""Create-project flow.

Wraps the composer with everything a caller needs around it:

1. VALIDATE  -- name, collision and port checks before any write.
2. GENERATE  -- run the composer; on failure remove the partial tree.
3. POST      -- git init, dependency install, tests, dev server and editor,
                each optional.
                Failures here are warnings; the tree is kept.
4. SUMMARY   -- a Rich table with the outcome and next steps.
"""

from __future__ import annotations

import asyncio
import shutil
import time
from pathlib import Path
from typing import Awaitable, Callable

from nodeforge.config import ProjectConfig, Settings, validate_port, validate_project_name
from nodeforge.errors import GenerationError, PostGenerationError
from nodeforge.logger import get_logger
from nodeforge.post_generate import (
    check_node_toolchain,
    install_dependencies,
    open_in_editor,
    run_project_tests,
    setup_git_repository,
    start_dev_server,
)
from nodeforge.scaffolder.composer import GenerationResult, ProjectComposer
from nodeforge.utils import (
    console,
    create_progress,
    format_duration,
    print_banner,
    print_success,
    print_summary_table,
    print_warning,
    progress_sink_for,
)

logger = get_logger(__name__)


class CreateProjectFlow:
    """Validate, generate and post-process one project.

    Attributes:
        config: The resolved project configuration.
        settings: Process-level settings (output directory, config file name).
        warnings: Messages collected from stub frontends and failed
            post-generation steps.
    """

    def __init__(self, config: ProjectConfig, settings: Settings | None = None) -> None:
        self.config = config
        self.settings = settings or Settings()
        self.warnings: list[str] = []

    @property
    def project_root(self) -> Path:
        return Path(self.settings.output_dir) / self.config.name

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Raise ``ProjectValidationError`` before anything is written."""
        validate_project_name(self.config.name, self.settings.output_dir)
        validate_port(self.config.port)

    async def generate(self) -> GenerationResult:
        """Run the composer, removing the partial tree if it fails."""
        with create_progress() as progress:
            task_id = progress.add_task("Generating project", total=None)
            composer = ProjectComposer(
                self.config,
                progress=progress_sink_for(progress, task_id),
                config_filename=self.settings.config_filename,
            )
            try:
                return await composer.generate(self.settings.output_dir)
            except GenerationError:
                await self._cleanup()
                raise

    async def _cleanup(self) -> None:
        root = self.project_root
        if not root.exists():
            return
        try:
            await asyncio.to_thread(shutil.rmtree, root)
            logger.info("removed partial project at %s", root)
        except OSError as exc:
            print_warning(f"Could not remove partial project at {root}: {exc}")

    async def post_generate(self, result: GenerationResult) -> None:
        """Run the optional post-generation steps in order."""
        if self.config.git_init:
            await self._post_step("git", self._git, result.root)
        if self.config.install_deps:
            await self._post_step("install", self._install, result.root)
        if "test" in self.config.run_after_create:
            await self._post_step("tests", self._tests, result.root)
        if "dev" in self.config.run_after_create:
            await self._post_step("dev", self._dev, result.root)
        if "vscode" in self.config.run_after_create:
            await self._post_step("vscode", self._editor, result.root)

    async def _post_step(
        self, label: str, step: Callable[[Path], Awaitable[None]], root: Path
    ) -> None:
        try:
            await step(root)
        except PostGenerationError as exc:
            self.warnings.append(str(exc))
            print_warning(f"Warning: {exc}")
            logger.debug("post-generation step %s failed", label, exc_info=True)

    async def _git(self, root: Path) -> None:
        committed = await setup_git_repository(root)
        if committed:
            print_success("Initialised git repository")
        else:
            self.warnings.append("git repository initialised without an initial commit")

    async def _install(self, root: Path) -> None:
        versions = await check_node_toolchain()
        if versions.get("npm") is None:
            raise PostGenerationError("npm install", "npm was not found on PATH")
        installed = await install_dependencies(root)
        print_success(f"Installed dependencies in {len(installed)} package(s)")

    async def _tests(self, root: Path) -> None:
        if not self.config.has("testing"):
            raise PostGenerationError("npm test", "testing is not enabled for this project")
        if not await run_project_tests(root):
            raise PostGenerationError("npm test", "backend tests failed")
        print_success("Backend tests passed")

    async def _dev(self, root: Path) -> None:
        pid = await start_dev_server(root)
        print_success(f"Development server starting in the background (pid {pid})")

    async def _editor(self, root: Path) -> None:
        await open_in_editor(root)
        print_success("Opened project in VS Code")

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self) -> GenerationResult:
        """Execute the whole flow.

        Raises:
            ProjectValidationError: Before any write.
            GenerationError: After the partial tree has been removed.
        """
        start = time.monotonic()
        self.validate()

        print_banner(
            "nodeforge",
            f"Project : {self.config.name}\n"
            f"Backend : {self.config.backend_lang} ({self.config.architecture})\n"
            f"Frontend: {self.config.frontend}\n"
            f"Output  : {self.project_root.resolve()}",
        )

        result = await self.generate()
        self.warnings.extend(result.notices)
        await self.post_generate(result)
        result.notices = list(self.warnings)

        self._print_summary(result, time.monotonic() - start)
        return result

    def _print_summary(self, result: GenerationResult, elapsed: float) -> None:
        data = {
            "Project": str(result.root),
            "Backend": str(result.backend),
            "Frontend": f"{result.frontend or '-'} ({result.frontend_status})",
            "Config": str(result.config_file),
            "Duration": format_duration(elapsed),
        }
        print_summary_table(data, title="Project created")
        for notice in result.notices:
            print_warning(f"- {notice}")

        console.print("[bold]Next steps:[/bold]")
        console.print(f"  cd {self.config.name}/backend")
        if not self.config.install_deps:
            console.print("  npm install")
        console.print("  npm run dev")
        if self.config.has_frontend:
            console.print("  cd ../frontend && npm install")
