"""Backend directory planning.

``plan_directories`` is pure: it returns the set of relative paths a backend
needs for a given configuration.  ``create_directories`` materialises a plan
and can be called any number of times on the same root.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from nodeforge.config import ProjectConfig

BASE_DIRECTORIES: frozenset[str] = frozenset(
    {
        "src",
        "src/controllers",
        "src/services",
        "src/models",
        "src/routes",
        "src/middlewares",
        "src/config",
        "src/utils",
        "src/dtos",
        "src/interfaces",
        "src/repositories",
        "src/validators",
        "tests",
        "tests/unit",
        "tests/integration",
        "logs",
        "docs",
    }
)

ARCHITECTURE_DIRECTORIES: dict[str, frozenset[str]] = {
    "clean": frozenset({"src/application", "src/domain", "src/infrastructure"}),
    "layered": frozenset({"src/data"}),
    "modular": frozenset({"src/modules", "src/modules/todo"}),
}


def plan_directories(config: ProjectConfig) -> frozenset[str]:
    """Return every backend directory (relative, POSIX style) for *config*."""
    extra = ARCHITECTURE_DIRECTORIES.get(config.architecture, frozenset())
    plan = set(BASE_DIRECTORIES | extra)
    if config.database == "sqlite":
        plan.add("database")
    return frozenset(plan)


async def create_directories(root: Path, plan: frozenset[str]) -> list[Path]:
    """Create each planned directory under *root*.

    Existing directories are left alone, so overlapping or repeated plans are
    not an error.  Returns the created paths in sorted order.
    """
    created: list[Path] = []
    for rel in sorted(plan):
        path = root / rel
        await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
        created.append(path)
    return created
