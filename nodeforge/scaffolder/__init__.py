"""nodeforge scaffolder -- writes Node.js project trees.

Takes a resolved ``ProjectConfig`` and renders a backend service, an
optional frontend, a root README, a CI workflow and the persisted config.

Quick usage::

    from nodeforge.config import build_config
    from nodeforge.scaffolder import ProjectComposer

    config = build_config(name="demo-api", database="postgres", features="auth,testing")
    result = await ProjectComposer(config).generate("/tmp/output")
"""

from nodeforge.scaffolder.backend import BackendGenerator
from nodeforge.scaffolder.composer import GenerationResult, ProjectComposer
from nodeforge.scaffolder.docker_gen import DockerGenerator
from nodeforge.scaffolder.frontend import FrontendGenerator, FrontendResult
from nodeforge.scaffolder.templates import TemplateRenderer

__all__ = [
    "BackendGenerator",
    "DockerGenerator",
    "FrontendGenerator",
    "FrontendResult",
    "GenerationResult",
    "ProjectComposer",
    "TemplateRenderer",
]
