"""Post-generation actions run against a finished project tree.

These are the only places nodeforge spawns processes.  They run after the
composer has returned successfully and never modify or remove generated
files on failure.  The dev server and the editor are launched detached and
never awaited.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from nodeforge.errors import PostGenerationError
from nodeforge.logger import get_logger
from nodeforge.utils import run_command

logger = get_logger(__name__)

INSTALL_TIMEOUT = 600
GIT_TIMEOUT = 60
TEST_TIMEOUT = 300


async def install_dependencies(project_root: str | Path) -> list[Path]:
    """Run ``npm install`` in ``backend`` and, when present, ``frontend``.

    Returns:
        The directories that were installed.

    Raises:
        PostGenerationError: On the first failing install.
    """
    root = Path(project_root)
    installed: list[Path] = []
    for name in ("backend", "frontend"):
        target = root / name
        if not (target / "package.json").exists():
            continue
        logger.info("installing dependencies in %s", target)
        rc, _out, err = await run_command(["npm", "install"], cwd=target, timeout=INSTALL_TIMEOUT)
        if rc != 0:
            raise PostGenerationError(f"npm install ({name})", err or f"exit code {rc}")
        installed.append(target)
    return installed


async def setup_git_repository(project_root: str | Path) -> bool:
    """Initialise a git repository and create the initial commit.

    Returns:
        ``True`` if the initial commit was created, ``False`` if only the
        repository could be initialised (for example when no git identity is
        configured).

    Raises:
        PostGenerationError: If ``git init`` or ``git add`` fails.
    """
    root = Path(project_root)
    for cmd in (["git", "init"], ["git", "add", "."]):
        rc, _out, err = await run_command(cmd, cwd=root, timeout=GIT_TIMEOUT)
        if rc != 0:
            raise PostGenerationError(" ".join(cmd), err or f"exit code {rc}")

    rc, _out, err = await run_command(
        ["git", "commit", "-m", "Initial commit"], cwd=root, timeout=GIT_TIMEOUT
    )
    if rc != 0:
        logger.warning("initial commit skipped: %s", err or f"exit code {rc}")
        return False
    return True


async def run_project_tests(project_root: str | Path) -> bool:
    """Run ``npm test`` in the backend.  Returns whether it passed."""
    backend = Path(project_root) / "backend"
    rc, out, err = await run_command(["npm", "test"], cwd=backend, timeout=TEST_TIMEOUT)
    if rc != 0:
        logger.debug("npm test output:\n%s\n%s", out, err)
    return rc == 0


async def check_node_toolchain() -> dict[str, str | None]:
    """Return the installed ``node`` and ``npm`` versions (``None`` if missing)."""
    versions: dict[str, str | None] = {}
    for tool in ("node", "npm"):
        rc, out, _err = await run_command([tool, "--version"], timeout=30)
        versions[tool] = out.strip() if rc == 0 and out else None
    return versions


async def _spawn_detached(action: str, cmd: list[str], cwd: Path) -> int:
    """Start *cmd* in its own session and return its pid without waiting."""
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as exc:
        raise PostGenerationError(action, f"could not start {cmd[0]}: {exc}") from exc
    logger.info("started %s (pid %s) in %s", " ".join(cmd), process.pid, cwd)
    return process.pid


async def start_dev_server(project_root: str | Path) -> int:
    """Launch ``npm run dev`` for the backend as a detached process.

    Returns:
        The pid of the started process.

    Raises:
        PostGenerationError: If npm cannot be started.
    """
    return await _spawn_detached("npm run dev", ["npm", "run", "dev"], Path(project_root) / "backend")


async def open_in_editor(project_root: str | Path, editor: str = "code") -> int:
    """Open the project root in VS Code (or *editor*) without waiting for it."""
    root = Path(project_root)
    return await _spawn_detached(f"open in {editor}", [editor, str(root)], root)
