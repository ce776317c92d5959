"""Dockerfile and Docker Compose generation for the backend service.

Uses the Jinja2 templates under ``templates/docker/`` to produce a two-stage
``Dockerfile``, a ``.dockerignore`` and, when a database is configured, a
``docker-compose.yml`` whose database service uses exactly the credentials
written to the env example file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from nodeforge.config import ProjectConfig
from nodeforge.logger import get_logger
from nodeforge.registries import DatabaseSpec

from .templates import TemplateRenderer

logger = get_logger(__name__)

# Hostname of the database service inside the compose network.
COMPOSE_DATABASE_HOST = "database"


def database_environment(spec: DatabaseSpec, database_name: str) -> list[str]:
    """Return the ``KEY=value`` environment entries for the database service."""
    if spec.image is None:
        return []
    if spec.scheme == "postgresql":
        return [
            f"POSTGRES_USER={spec.user}",
            f"POSTGRES_PASSWORD={spec.password}",
            f"POSTGRES_DB={database_name}",
        ]
    if spec.scheme == "mysql":
        return [
            f"MYSQL_ROOT_PASSWORD={spec.password}",
            f"MYSQL_DATABASE={database_name}",
        ]
    return [f"MONGO_INITDB_DATABASE={database_name}"]


class DockerGenerator:
    """Generates the backend Dockerfile, .dockerignore and compose file."""

    # Template name -> output file name
    _DOCKER_FILES: dict[str, str] = {
        "docker/Dockerfile.j2": "Dockerfile",
        "docker/dockerignore.j2": ".dockerignore",
    }

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def compose_context(self, config: ProjectConfig) -> dict[str, Any]:
        """Extra template context for ``docker-compose.yml``.

        Raises:
            ValueError: If *config* has no database.
        """
        spec = config.database_spec
        if spec is None:
            raise ValueError("compose file requires a database")
        if spec.has_server:
            url = spec.connection_url(config.database_name, host=COMPOSE_DATABASE_HOST)
        else:
            # Embedded databases are named after the project in the env file.
            url = spec.connection_url(config.name)
        return {
            "db": spec,
            "compose_database_url": url,
            "database_environment": database_environment(spec, config.database_name),
            "volume_name": f"{config.database}_data",
        }

    async def generate_all(
        self,
        output_dir: Path,
        config: ProjectConfig,
        context: dict[str, Any],
    ) -> dict[str, Path]:
        """Generate every Docker file for the backend in *output_dir*.

        Args:
            output_dir: The ``backend/`` directory inside the project root.
            config: Resolved project configuration.
            context: Backend template context (port, is_ts, healthcheck...).

        Returns:
            Mapping of output file name to written path.  ``docker-compose.yml``
            is present only when a database is configured.
        """
        result: dict[str, Path] = {}

        for template_name, output_name in self._DOCKER_FILES.items():
            result[output_name] = await self.renderer.render_to_file(
                template_name, output_dir / output_name, context
            )

        if config.has_database:
            compose_ctx = {**context, **self.compose_context(config)}
            result["docker-compose.yml"] = await self.renderer.render_to_file(
                "docker/docker-compose.yml.j2",
                output_dir / "docker-compose.yml",
                compose_ctx,
            )
        else:
            logger.debug("no database configured, skipping docker-compose.yml")

        return result
