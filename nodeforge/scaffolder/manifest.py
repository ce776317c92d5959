"""package.json construction for generated sub-projects.

The backend manifest is assembled from small resolver functions, one per
concern.  Each resolver takes the full ``ProjectConfig`` and returns a
partial mapping; ``build_manifest`` merges them in a fixed order.  Adding a
concern means adding a resolver to the relevant tuple, never growing a
branch tree.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from nodeforge.config import ProjectConfig
from nodeforge.registries import DATABASE_DRIVERS, DATABASES, JEST_FAMILY, VITEST_FAMILY

Resolver = Callable[[ProjectConfig], dict[str, str]]

NODE_ENGINE = ">=16.0.0"


# ---------------------------------------------------------------------------
# Manifest model
# ---------------------------------------------------------------------------


class ManifestDescriptor(BaseModel):
    """A ``package.json`` document.

    Construction fails if the combined dependency maps mix both test
    framework families or carry more than one database driver.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    version: str = "1.0.0"
    description: str = ""
    private: Optional[bool] = None
    main: Optional[str] = None
    scripts: dict[str, str] = Field(default_factory=dict)
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict, alias="devDependencies")
    keywords: list[str] = Field(default_factory=list)
    author: str = ""
    license: str = "MIT"
    engines: dict[str, str] = Field(default_factory=lambda: {"node": NODE_ENGINE})

    @model_validator(mode="after")
    def _check_contracts(self) -> "ManifestDescriptor":
        packages = self.all_packages()
        if packages & VITEST_FAMILY and packages & JEST_FAMILY:
            raise ValueError("manifest mixes the vitest and jest test families")
        drivers = packages & DATABASE_DRIVERS
        if len(drivers) > 1:
            raise ValueError(f"manifest has more than one database driver: {sorted(drivers)}")
        return self

    def all_packages(self) -> set[str]:
        return set(self.dependencies) | set(self.dev_dependencies)

    def to_package_json(self) -> dict:
        """Return the manifest as a JSON-ready dict in npm's key order."""
        return self.model_dump(by_alias=True, exclude_none=True)


def _merge(resolvers: Iterable[Resolver], config: ProjectConfig) -> dict[str, str]:
    merged: dict[str, str] = {}
    for resolver in resolvers:
        merged.update(resolver(config))
    return merged


# ---------------------------------------------------------------------------
# Scripts
# ---------------------------------------------------------------------------


def language_scripts(config: ProjectConfig) -> dict[str, str]:
    if config.is_typescript:
        return {
            "start": "node dist/server.js",
            "dev": "ts-node src/server.ts",
            "build": "tsc",
            "type-check": "tsc --noEmit",
            "dev:watch": "nodemon --exec ts-node src/server.ts",
        }
    return {
        "start": "node src/server.js",
        "dev": "nodemon src/server.js",
    }


def testing_scripts(config: ProjectConfig) -> dict[str, str]:
    framework = config.test_framework
    if framework == "vitest":
        return {
            "test": "vitest run",
            "test:watch": "vitest --watch",
            "test:coverage": "vitest run --coverage",
        }
    if framework == "jest":
        return {
            "test": "jest",
            "test:watch": "jest --watch",
            "test:coverage": "jest --coverage",
        }
    return {}


def docker_scripts(config: ProjectConfig) -> dict[str, str]:
    if not config.wants_docker:
        return {}
    return {
        "docker:build": "docker build -t ${npm_package_name} .",
        "docker:run": f"docker run -p {config.port}:{config.port} ${{npm_package_name}}",
    }


def lint_scripts(config: ProjectConfig) -> dict[str, str]:
    return {
        "lint": f'eslint "src/**/*.{config.ext}"',
        "format": f'prettier --write "src/**/*.{config.ext}"',
    }


SCRIPT_RESOLVERS: tuple[Resolver, ...] = (
    language_scripts,
    testing_scripts,
    docker_scripts,
    lint_scripts,
)


def resolve_scripts(config: ProjectConfig) -> dict[str, str]:
    return _merge(SCRIPT_RESOLVERS, config)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def core_dependencies(config: ProjectConfig) -> dict[str, str]:
    return {
        "express": "^4.18.0",
        "cors": "^2.8.5",
        "dotenv": "^16.0.0",
        "helmet": "^7.0.0",
        "compression": "^1.7.0",
        "express-rate-limit": "^6.0.0",
    }


def logging_dependencies(config: ProjectConfig) -> dict[str, str]:
    if config.has("logging"):
        return {"winston": "^3.11.0", "winston-daily-rotate-file": "^4.7.1"}
    return {"morgan": "^1.10.0"}


def validation_dependencies(config: ProjectConfig) -> dict[str, str]:
    if not config.has("validation"):
        return {}
    return {"zod": "^3.22.0"} if config.is_typescript else {"joi": "^17.9.0"}


def database_dependencies(config: ProjectConfig) -> dict[str, str]:
    spec = config.database_spec
    return dict(spec.drivers) if spec else {}


def auth_dependencies(config: ProjectConfig) -> dict[str, str]:
    if not config.has("auth"):
        return {}
    return {"jsonwebtoken": "^9.0.0", "bcrypt": "^5.1.0", "express-jwt": "^8.4.0"}


def docs_dependencies(config: ProjectConfig) -> dict[str, str]:
    if not config.has("docs"):
        return {}
    return {
        "swagger": "^0.7.5",
        "swagger-jsdoc": "^6.2.8",
        "swagger-ui-express": "^5.0.0",
    }


def observability_dependencies(config: ProjectConfig) -> dict[str, str]:
    deps: dict[str, str] = {}
    if config.has("metrics"):
        deps["prom-client"] = "^15.0.0"
    if config.has("opentelemetry"):
        deps["@opentelemetry/sdk-node"] = "^0.45.0"
        deps["@opentelemetry/auto-instrumentations-node"] = "^0.40.0"
    return deps


DEPENDENCY_RESOLVERS: tuple[Resolver, ...] = (
    core_dependencies,
    logging_dependencies,
    validation_dependencies,
    database_dependencies,
    auth_dependencies,
    docs_dependencies,
    observability_dependencies,
)


def resolve_dependencies(config: ProjectConfig) -> dict[str, str]:
    return _merge(DEPENDENCY_RESOLVERS, config)


# ---------------------------------------------------------------------------
# Dev dependencies
# ---------------------------------------------------------------------------


def typescript_dev_dependencies(config: ProjectConfig) -> dict[str, str]:
    """Compiler, runner and ``@types`` packages for untyped runtime deps."""
    if not config.is_typescript:
        return {}
    deps = {
        "typescript": "^5.1.0",
        "ts-node": "^10.9.0",
        "@types/node": "^20.0.0",
        "@types/express": "^4.17.0",
        "@types/cors": "^2.8.0",
        "@types/compression": "^1.7.0",
    }
    if not config.has("logging"):
        deps["@types/morgan"] = "^1.9.0"
    if config.has("auth"):
        deps["@types/jsonwebtoken"] = "^9.0.0"
        deps["@types/bcrypt"] = "^5.0.0"
    if config.has("docs"):
        deps["@types/swagger-jsdoc"] = "^6.0.0"
        deps["@types/swagger-ui-express"] = "^4.1.0"
    spec = DATABASES.get(config.database)
    if spec:
        deps.update(spec.type_packages)
    if config.has("testing"):
        deps["@types/supertest"] = "^2.0.0"
    return deps


def watcher_dev_dependencies(config: ProjectConfig) -> dict[str, str]:
    return {"nodemon": "^3.0.0"}


def testing_dev_dependencies(config: ProjectConfig) -> dict[str, str]:
    framework = config.test_framework
    if framework is None:
        return {}
    if framework == "vitest":
        deps = {
            "vitest": "^0.34.0",
            "@vitest/ui": "^0.34.0",
            "@vitest/coverage-v8": "^0.34.0",
        }
    else:
        deps = {"jest": "^29.0.0", "@types/jest": "^29.0.0"}
        if config.is_typescript:
            deps["ts-jest"] = "^29.1.0"
    deps["supertest"] = "^6.3.0"
    return deps


def lint_dev_dependencies(config: ProjectConfig) -> dict[str, str]:
    deps = {
        "eslint": "^8.45.0",
        "eslint-config-prettier": "^8.8.0",
        "prettier": "^3.0.0",
    }
    if config.is_typescript:
        deps["@typescript-eslint/eslint-plugin"] = "^6.0.0"
        deps["@typescript-eslint/parser"] = "^6.0.0"
    return deps


DEV_DEPENDENCY_RESOLVERS: tuple[Resolver, ...] = (
    typescript_dev_dependencies,
    watcher_dev_dependencies,
    testing_dev_dependencies,
    lint_dev_dependencies,
)


def resolve_dev_dependencies(config: ProjectConfig) -> dict[str, str]:
    return _merge(DEV_DEPENDENCY_RESOLVERS, config)


# ---------------------------------------------------------------------------
# Top-level builder
# ---------------------------------------------------------------------------


def build_manifest(config: ProjectConfig) -> ManifestDescriptor:
    """Assemble the backend ``package.json`` for *config*."""
    return ManifestDescriptor(
        name=f"{config.package_name}-backend",
        description=config.description,
        main="dist/server.js" if config.is_typescript else "src/server.js",
        scripts=resolve_scripts(config),
        dependencies=resolve_dependencies(config),
        dev_dependencies=resolve_dev_dependencies(config),
        keywords=["api", "backend", "rest", "nodejs", config.backend_lang],
    )
