"""Backend environment file construction.

An ``EnvFile`` is an ordered list of ``EnvSection`` blocks.  Each block has
its own resolver; resolvers return ``None`` when their concern is disabled.
Section order is fixed: app, logging, database, auth, cors, rate-limit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from nodeforge.config import ProjectConfig

JWT_SECRET_PLACEHOLDER = "your_super_secret_jwt_key_change_in_production"


@dataclass(frozen=True)
class EnvSection:
    """One commented block of ``KEY=value`` lines."""

    key: str
    title: str
    entries: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def keys(self) -> list[str]:
        return [k for k, _ in self.entries]

    def render(self) -> list[str]:
        lines = [f"# {self.title}"]
        lines.extend(f"{k}={v}" for k, v in self.entries)
        lines.append("")
        return lines


@dataclass(frozen=True)
class EnvFile:
    sections: tuple[EnvSection, ...]

    def section(self, key: str) -> EnvSection | None:
        for section in self.sections:
            if section.key == key:
                return section
        return None

    def as_dict(self) -> dict[str, str]:
        """Flatten every section into a single ``{KEY: value}`` mapping."""
        return {k: v for section in self.sections for k, v in section.entries}

    def render(self) -> str:
        lines: list[str] = []
        for section in self.sections:
            lines.extend(section.render())
        return "\n".join(lines)


SectionResolver = Callable[[ProjectConfig], Optional[EnvSection]]


# ---------------------------------------------------------------------------
# Section resolvers
# ---------------------------------------------------------------------------


def app_section(config: ProjectConfig) -> EnvSection:
    return EnvSection(
        "app",
        "Application",
        (
            ("PORT", str(config.port)),
            ("NODE_ENV", "development"),
            ("APP_NAME", config.name),
        ),
    )


def logging_section(config: ProjectConfig) -> EnvSection:
    return EnvSection(
        "logging",
        "Logging",
        (
            ("LOG_LEVEL", "info"),
            ("LOG_FORMAT", "text"),
            ("LOG_STORAGE", "file"),
            ("LOG_FILE_ENABLED", "true"),
            ("LOG_CONSOLE_ENABLED", "true"),
        ),
    )


def database_section(config: ProjectConfig) -> EnvSection | None:
    spec = config.database_spec
    if spec is None:
        return None
    title = f"Database ({config.database})"
    if not spec.has_server:
        return EnvSection(
            "database", title, (("DATABASE_URL", spec.connection_url(config.name)),)
        )
    return EnvSection(
        "database",
        title,
        (
            ("DB_HOST", spec.host),
            ("DB_PORT", str(spec.port)),
            ("DB_USERNAME", spec.user),
            ("DB_PASSWORD", spec.password),
            ("DB_DATABASE", config.database_name),
            ("DATABASE_URL", spec.connection_url(config.database_name)),
        ),
    )


def auth_section(config: ProjectConfig) -> EnvSection | None:
    if not config.has("auth"):
        return None
    return EnvSection(
        "auth",
        "Authentication",
        (
            ("JWT_SECRET", JWT_SECRET_PLACEHOLDER),
            ("JWT_EXPIRES_IN", "7d"),
            ("JWT_REFRESH_EXPIRES_IN", "30d"),
        ),
    )


def cors_section(config: ProjectConfig) -> EnvSection | None:
    origin = config.cors_origin
    if origin is None:
        return None
    return EnvSection(
        "cors",
        "CORS",
        (("CORS_ORIGIN", origin), ("CORS_CREDENTIALS", "true")),
    )


def rate_limit_section(config: ProjectConfig) -> EnvSection | None:
    if not config.has("rateLimit"):
        return None
    return EnvSection(
        "rate-limit",
        "Rate Limiting",
        (("RATE_LIMIT_WINDOW_MS", "900000"), ("RATE_LIMIT_MAX_REQUESTS", "100")),
    )


SECTION_RESOLVERS: tuple[SectionResolver, ...] = (
    app_section,
    logging_section,
    database_section,
    auth_section,
    cors_section,
    rate_limit_section,
)


def build_env_file(config: ProjectConfig) -> EnvFile:
    """Resolve every section for *config*, dropping disabled ones."""
    sections = tuple(
        section
        for section in (resolver(config) for resolver in SECTION_RESOLVERS)
        if section is not None
    )
    return EnvFile(sections)
