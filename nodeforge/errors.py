"""Exception hierarchy for project generation.

Three failure classes, one per pipeline stage:

- ``ProjectValidationError`` -- the configuration is unusable.  Raised before
  anything touches the filesystem.
- ``GenerationError`` -- a filesystem or template failure while writing the
  tree.  Raised once by the composer; the caller decides about cleanup.
- ``PostGenerationError`` -- install / git / test failure after a valid tree
  exists.  Reported as a warning, never rolls anything back.
"""

from __future__ import annotations


class NodeforgeError(Exception):
    """Base class for all nodeforge errors."""


class ProjectValidationError(NodeforgeError):
    """Raised when a project configuration is invalid or collides with disk state."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


class GenerationError(NodeforgeError):
    """Raised when writing the project tree fails part-way."""

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(f"Generation failed during {step}: {message}")


class PostGenerationError(NodeforgeError):
    """Raised when a post-generation action (install, git, tests) fails."""

    def __init__(self, action: str, message: str) -> None:
        self.action = action
        super().__init__(f"{action} failed: {message}")
