"""nodeforge configuration.

Two pydantic v2 models live here:

- ``ProjectConfig`` -- the fully-resolved description of one project to
  generate.  Built once (from CLI flags or a profile), read by every
  generator, and persisted beside the generated tree.
- ``Settings`` -- process-level knobs (output directory, persisted file name,
  log level) with an environment-variable loader.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from nodeforge.errors import ProjectValidationError
from nodeforge.registries import (
    DATABASES,
    FRONTEND_PORTS,
    KNOWN_FEATURES,
    PROFILE_ARCHITECTURE,
    PROFILE_FEATURES,
    Architecture,
    BackendLang,
    DatabaseKind,
    DatabaseSpec,
    FrontendKind,
    PostCreateAction,
    Profile,
    frontend_origin,
)

NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
MAX_NAME_LENGTH = 50
DEFAULT_CONFIG_FILENAME = ".nodeforge.json"


class ProjectConfig(BaseModel):
    """Pydantic model describing the project to generate.

    Field names are snake_case in Python and camelCase on disk
    (``backendLang``, ``connectToBackend``...), matching the manifest
    conventions of the generated Node projects.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH, pattern=NAME_PATTERN.pattern)
    description: str = Field(default="A professional fullstack application")
    backend_lang: BackendLang = Field(default="TypeScript")
    frontend: FrontendKind = Field(default="none")
    architecture: Architecture = Field(default="mvc")
    database: DatabaseKind = Field(default="none")
    port: int = Field(default=3000, ge=1, le=65535)
    features: set[str] = Field(default_factory=set)
    frontend_features: list[str] = Field(default_factory=list)
    git_init: bool = Field(default=False)
    install_deps: bool = Field(default=True)
    connect_to_backend: bool = Field(default=False)
    docker: bool = Field(default=False)
    ci: bool = Field(default=False)
    run_after_create: list[PostCreateAction] = Field(default_factory=list)
    profile: Optional[Profile] = Field(default=None)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @field_validator("features", mode="before")
    @classmethod
    def _coerce_features(cls, value: Any) -> Any:
        if value is None:
            return set()
        if isinstance(value, str):
            return {part.strip() for part in value.split(",") if part.strip()}
        return value

    @field_validator("features")
    @classmethod
    def _known_features(cls, value: set[str]) -> set[str]:
        unknown = sorted(value - KNOWN_FEATURES)
        if unknown:
            raise ValueError(f"unknown feature flag(s): {', '.join(unknown)}")
        return value

    @model_validator(mode="after")
    def _resolve_invariants(self) -> "ProjectConfig":
        # A profile replaces both the feature set and the architecture.
        if self.profile is not None:
            self.features = set(PROFILE_FEATURES[self.profile])
            self.architecture = PROFILE_ARCHITECTURE[self.profile]
        if self.frontend == "none":
            self.connect_to_backend = False
        return self

    @field_serializer("features")
    def _serialize_features(self, value: set[str]) -> list[str]:
        return sorted(value)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def has(self, feature: str) -> bool:
        """Return ``True`` if *feature* is in the resolved feature set."""
        return feature in self.features

    @property
    def is_typescript(self) -> bool:
        return self.backend_lang == "TypeScript"

    @property
    def ext(self) -> str:
        """Source file extension for the backend (``ts`` or ``js``)."""
        return "ts" if self.is_typescript else "js"

    @property
    def has_frontend(self) -> bool:
        return self.frontend != "none"

    @property
    def has_database(self) -> bool:
        return self.database != "none"

    @property
    def database_spec(self) -> DatabaseSpec | None:
        return DATABASES.get(self.database)

    @property
    def database_name(self) -> str:
        return f"{self.name}_db"

    @property
    def package_name(self) -> str:
        """Lowercased name for npm packages and image tags."""
        return self.name.lower()

    @property
    def wants_docker(self) -> bool:
        # The CI workflow always builds the backend image.
        return self.docker or self.has("docker") or self.wants_ci

    @property
    def wants_ci(self) -> bool:
        return self.ci or self.has("ci")

    @property
    def test_framework(self) -> str | None:
        """``"vitest"``, ``"jest"`` or ``None`` when testing is disabled."""
        if not self.has("testing"):
            return None
        return "vitest" if self.has("vitest") else "jest"

    @property
    def frontend_port(self) -> int | None:
        if not self.has_frontend:
            return None
        return FRONTEND_PORTS[self.frontend]

    @property
    def cors_origin(self) -> str | None:
        """Origin the backend must allow, or ``None`` without a frontend."""
        if not self.has_frontend:
            return None
        return frontend_origin(self.frontend)

    @property
    def api_base_url(self) -> str:
        return f"http://localhost:{self.port}/api"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_json(self) -> str:
        return self.model_dump_json(indent=2, by_alias=True)

    def save(self, project_root: Path, filename: str = DEFAULT_CONFIG_FILENAME) -> Path:
        """Write the configuration to ``<project_root>/<filename>``.

        Returns:
            The path of the written file.
        """
        target = Path(project_root) / filename
        target.write_text(self.to_json() + "\n", encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ProjectConfig":
        """Load a previously persisted configuration.

        Args:
            path: Either the JSON file itself or the project root containing
                the default config file.
        """
        target = Path(path)
        if target.is_dir():
            target = target / DEFAULT_CONFIG_FILENAME
        return cls.model_validate_json(target.read_text(encoding="utf-8"))


class Settings(BaseModel):
    """Process-level settings for a nodeforge run."""

    output_dir: Path = Field(default_factory=Path.cwd)
    config_filename: str = Field(default=DEFAULT_CONFIG_FILENAME)
    log_level: str = Field(default="WARNING")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            NODEFORGE_OUTPUT_DIR, NODEFORGE_CONFIG_FILE, NODEFORGE_LOG_LEVEL.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("NODEFORGE_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["NODEFORGE_OUTPUT_DIR"])
        if os.environ.get("NODEFORGE_CONFIG_FILE"):
            kwargs["config_filename"] = os.environ["NODEFORGE_CONFIG_FILE"]
        if os.environ.get("NODEFORGE_LOG_LEVEL"):
            kwargs["log_level"] = os.environ["NODEFORGE_LOG_LEVEL"]
        return cls(**kwargs)


# ---------------------------------------------------------------------------
# Caller-side validation helpers
# ---------------------------------------------------------------------------


def validate_project_name(name: str, output_dir: str | Path | None = None) -> str:
    """Check charset, length and (optionally) collision with an existing path.

    Returns:
        The stripped name.

    Raises:
        ProjectValidationError: On any violation.
    """
    stripped = (name or "").strip()
    if not stripped:
        raise ProjectValidationError("name", "Project name is required")
    if len(stripped) > MAX_NAME_LENGTH:
        raise ProjectValidationError(
            "name", f"Project name must be at most {MAX_NAME_LENGTH} characters"
        )
    if not NAME_PATTERN.match(stripped):
        raise ProjectValidationError(
            "name", "Project name can only contain letters, numbers, hyphens and underscores"
        )
    if output_dir is not None and (Path(output_dir) / stripped).exists():
        raise ProjectValidationError("name", f'Directory "{stripped}" already exists')
    return stripped


def validate_port(port: str | int) -> int:
    """Parse and range-check a TCP port."""
    try:
        value = int(port)
    except (TypeError, ValueError):
        raise ProjectValidationError("port", f"Invalid port: {port!r}") from None
    if not 0 < value < 65536:
        raise ProjectValidationError("port", f"Port out of range: {value}")
    return value


def build_config(**kwargs: Any) -> ProjectConfig:
    """Construct a ``ProjectConfig``, translating pydantic errors.

    Raises:
        ProjectValidationError: Naming the first offending field.
    """
    try:
        return ProjectConfig(**kwargs)
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = ".".join(str(part) for part in first.get("loc", ())) or "config"
        raise ProjectValidationError(loc, first.get("msg", str(exc))) from exc
