"""Static lookup tables shared by every generator.

All tables are read-only ``MappingProxyType`` views or frozensets built once
at import time.  Nothing in this module is mutated at runtime; generators
look values up and never write back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal, Mapping

# ---------------------------------------------------------------------------
# Enumerations (as Literal aliases, validated by pydantic in config.py)
# ---------------------------------------------------------------------------

BackendLang = Literal["TypeScript", "JavaScript"]
FrontendKind = Literal["vanilla", "vue", "next", "angular", "react", "svelte", "none"]
Architecture = Literal["mvc", "clean", "layered", "modular", "microservices"]
DatabaseKind = Literal["none", "postgres", "mysql", "mongodb", "sqlite"]
Profile = Literal["startup", "enterprise", "microservice"]
PostCreateAction = Literal["test", "dev", "vscode"]

KNOWN_FEATURES: frozenset[str] = frozenset(
    {
        "auth",
        "database",
        "docs",
        "logging",
        "validation",
        "rateLimit",
        "cors",
        "testing",
        "vitest",
        "docker",
        "ci",
        "graceful-shutdown",
        "healthcheck",
        "metrics",
        "opentelemetry",
    }
)


# ---------------------------------------------------------------------------
# Frontend registries
# ---------------------------------------------------------------------------

FRONTEND_PORTS: Mapping[str, int] = MappingProxyType(
    {
        "vanilla": 8080,
        "vue": 5173,
        "react": 5173,
        "next": 3000,
        "angular": 4200,
        "svelte": 5173,
        "none": 0,
    }
)

SUPPORTED = "supported"
STUB = "stub"

FRONTEND_CAPABILITIES: Mapping[str, str] = MappingProxyType(
    {
        "vanilla": SUPPORTED,
        "vue": STUB,
        "react": STUB,
        "next": STUB,
        "angular": STUB,
        "svelte": STUB,
    }
)

FRONTEND_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "vanilla": "Vanilla (HTML/CSS/JS)",
        "vue": "Vue.js 3 + Vite",
        "react": "React + Vite",
        "next": "Next.js",
        "angular": "Angular",
        "svelte": "Svelte + Vite",
        "none": "None",
    }
)


@dataclass(frozen=True)
class FrontendManifestSpec:
    """Scripts and packages for a framework-based frontend manifest."""

    scripts: Mapping[str, str]
    dependencies: Mapping[str, str]
    dev_dependencies: Mapping[str, str] = field(default_factory=dict)


FRONTEND_MANIFESTS: Mapping[str, FrontendManifestSpec] = MappingProxyType(
    {
        "vue": FrontendManifestSpec(
            scripts={
                "dev": "vite",
                "build": "vite build",
                "preview": "vite preview",
                "test": "vitest",
            },
            dependencies={"vue": "^3.3.4", "axios": "^1.4.0", "pinia": "^2.1.4"},
            dev_dependencies={
                "@vitejs/plugin-vue": "^4.2.3",
                "vite": "^4.4.5",
                "@vue/test-utils": "^2.4.0",
                "vitest": "^0.34.0",
            },
        ),
        "react": FrontendManifestSpec(
            scripts={
                "dev": "vite",
                "build": "vite build",
                "preview": "vite preview",
                "test": "vitest",
            },
            dependencies={"react": "^18.2.0", "react-dom": "^18.2.0", "axios": "^1.4.0"},
            dev_dependencies={
                "@vitejs/plugin-react": "^4.0.3",
                "vite": "^4.4.5",
                "vitest": "^0.34.0",
            },
        ),
        "next": FrontendManifestSpec(
            scripts={"dev": "next dev", "build": "next build", "start": "next start"},
            dependencies={
                "next": "^13.4.12",
                "react": "^18.2.0",
                "react-dom": "^18.2.0",
                "axios": "^1.4.0",
            },
            dev_dependencies={"eslint": "^8.45.0", "eslint-config-next": "^13.4.12"},
        ),
        "angular": FrontendManifestSpec(
            scripts={
                "start": "ng serve",
                "build": "ng build",
                "test": "ng test",
            },
            dependencies={
                "@angular/core": "^16.1.0",
                "@angular/common": "^16.1.0",
                "@angular/compiler": "^16.1.0",
                "@angular/platform-browser": "^16.1.0",
                "@angular/platform-browser-dynamic": "^16.1.0",
                "@angular/router": "^16.1.0",
                "rxjs": "^7.8.0",
                "zone.js": "^0.13.0",
            },
            dev_dependencies={
                "@angular/cli": "^16.1.0",
                "@angular/compiler-cli": "^16.1.0",
                "typescript": "~5.1.3",
            },
        ),
        "svelte": FrontendManifestSpec(
            scripts={
                "dev": "vite",
                "build": "vite build",
                "preview": "vite preview",
            },
            dependencies={"axios": "^1.4.0"},
            dev_dependencies={
                "svelte": "^4.0.5",
                "@sveltejs/vite-plugin-svelte": "^2.4.2",
                "vite": "^4.4.5",
            },
        ),
    }
)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

PROFILE_FEATURES: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        "startup": frozenset({"auth", "database"}),
        "enterprise": frozenset({"auth", "database", "logging", "validation", "metrics"}),
        "microservice": frozenset({"healthcheck", "graceful-shutdown", "opentelemetry"}),
    }
)

PROFILE_ARCHITECTURE: Mapping[str, str] = MappingProxyType(
    {
        "startup": "mvc",
        "enterprise": "mvc",
        "microservice": "microservices",
    }
)


# ---------------------------------------------------------------------------
# Databases
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseSpec:
    """Everything the generators need to know about one database kind.

    ``host``/``port``/``user``/``password`` are fixed development defaults.
    They appear verbatim in the env example file and in the compose service
    so the two always agree.  ``image`` is ``None`` for embedded databases.
    """

    label: str
    drivers: Mapping[str, str]
    type_packages: Mapping[str, str] = field(default_factory=dict)
    scheme: str = ""
    host: str = "localhost"
    port: int = 0
    user: str = ""
    password: str = ""
    image: str | None = None
    data_path: str = ""

    @property
    def has_server(self) -> bool:
        return self.image is not None

    def connection_url(self, database_name: str, host: str | None = None) -> str:
        """Build the ``DATABASE_URL`` value for *database_name*."""
        if not self.has_server:
            return f"{self.scheme}:./database/{database_name}.sqlite"
        credentials = f"{self.user}:{self.password}@" if self.user else ""
        return f"{self.scheme}://{credentials}{host or self.host}:{self.port}/{database_name}"


DATABASES: Mapping[str, DatabaseSpec] = MappingProxyType(
    {
        "postgres": DatabaseSpec(
            label="PostgreSQL",
            drivers={"pg": "^8.10.0"},
            type_packages={"@types/pg": "^8.10.0"},
            scheme="postgresql",
            port=5432,
            user="postgres",
            password="postgres",
            image="postgres:15-alpine",
            data_path="/var/lib/postgresql/data",
        ),
        "mysql": DatabaseSpec(
            label="MySQL",
            drivers={"mysql2": "^3.5.0"},
            scheme="mysql",
            port=3306,
            user="root",
            password="root",
            image="mysql:8",
            data_path="/var/lib/mysql",
        ),
        "mongodb": DatabaseSpec(
            label="MongoDB",
            drivers={"mongoose": "^7.3.0"},
            scheme="mongodb",
            port=27017,
            image="mongo:6",
            data_path="/data/db",
        ),
        "sqlite": DatabaseSpec(
            label="SQLite",
            drivers={"sqlite3": "^5.1.6", "sqlite": "^5.0.1"},
            scheme="sqlite",
        ),
    }
)

# Packages that count as "the database driver" for manifest contracts.
# ``sqlite`` is a promise wrapper around ``sqlite3``, not a second driver.
DATABASE_DRIVERS: frozenset[str] = frozenset({"pg", "mysql2", "mongoose", "sqlite3"})

VITEST_FAMILY: frozenset[str] = frozenset({"vitest", "@vitest/ui", "@vitest/coverage-v8"})
JEST_FAMILY: frozenset[str] = frozenset({"jest", "@types/jest", "ts-jest"})


def frontend_port(frontend: str) -> int:
    """Return the default serving port for *frontend*.

    Raises ``KeyError`` for ``"none"``: a project without a frontend has no
    port to resolve.
    """
    if frontend == "none":
        raise KeyError("frontend 'none' has no serving port")
    return FRONTEND_PORTS[frontend]


def frontend_origin(frontend: str) -> str:
    """``http://localhost:<port>`` for the chosen frontend."""
    return f"http://localhost:{frontend_port(frontend)}"
