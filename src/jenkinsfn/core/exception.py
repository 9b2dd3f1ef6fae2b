"""Centralized customized exceptions for jenkinsfn.

Internal code should prefer explicit imports:

    from jenkinsfn.core.exception import ResourceWriteError
"""

from __future__ import annotations

__all__ = [
    "ResourceWriteError",
    "SourceScanError",
    "StepLoadError",
    "ManifestError",
]


class ResourceWriteError(OSError):
    """Raised by a resource writer when a generated file cannot be persisted."""

    def __init__(self, *, namespace: str, filename: str, reason: str):
        super().__init__(f"Failed writing {namespace}/{filename}: {reason}")
        self.namespace = namespace
        self.filename = filename
        self.reason = reason


class SourceScanError(ValueError):
    """Raised when a Python source file cannot be parsed for static scanning."""

    def __init__(self, *, path: str, reason: str):
        super().__init__(f"Cannot scan {path}: {reason}")
        self.path = path
        self.reason = reason


class StepLoadError(RuntimeError):
    """Raised when a registered step type cannot be imported."""


class ManifestError(ValueError):
    """Raised when a scan manifest is invalid (YAML or schema)."""
