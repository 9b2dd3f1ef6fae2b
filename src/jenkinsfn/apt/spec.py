from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic.config import ConfigDict

from jenkinsfn.core.exception import ManifestError


class ScanManifestSpec(BaseModel):
    """Scan manifest (YAML): where to find steps and where to write descriptors.

    Relative paths are taken relative to the manifest file.
    """

    model_config = ConfigDict(extra="forbid")

    version: int = 1
    # Directories scanned statically (ast), nothing is imported.
    sources: List[str] = Field(default_factory=list)
    # Dotted module names imported and inspected.
    modules: List[str] = Field(default_factory=list)
    # Directories whose .py files are imported and inspected.
    paths: List[str] = Field(default_factory=list)
    output_root: Optional[str] = None
    namespace: Optional[str] = None


def load_manifest(path: str | Path) -> ScanManifestSpec:
    p = Path(path)
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ManifestError(f"Cannot read scan manifest {p}: {e}") from e
    try:
        spec = ScanManifestSpec.model_validate(raw)
    except ValidationError as e:
        raise ManifestError(f"Invalid scan manifest {p}: {e}") from e

    base = p.resolve().parent

    def rel(x: str) -> str:
        q = Path(x).expanduser()
        return str(q if q.is_absolute() else base / q)

    return spec.model_copy(
        update={
            "sources": [rel(s) for s in spec.sources],
            "paths": [rel(s) for s in spec.paths],
            "output_root": rel(spec.output_root) if spec.output_root else None,
        }
    )


__all__ = ["ScanManifestSpec", "load_manifest"]
