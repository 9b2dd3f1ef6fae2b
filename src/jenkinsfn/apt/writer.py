from __future__ import annotations

import abc
import logging
from pathlib import Path
from typing import Dict, Tuple

from jenkinsfn.core.exception import ResourceWriteError

log = logging.getLogger("jenkinsfn.apt.writer")


class ResourceWriter(abc.ABC):
    """Sink for generated text resources addressed by (namespace, filename)."""

    @abc.abstractmethod
    def write_file(self, namespace: str, filename: str, text: str) -> str:
        """Persist ``text`` and return where it went. Raises ResourceWriteError."""
        raise NotImplementedError


class FilesystemWriter(ResourceWriter):
    """Writes ``<root>/<namespace with dots as dirs>/<filename>`` as UTF-8."""

    def __init__(self, root: str | Path, *, encoding: str = "utf-8"):
        self.root = Path(root)
        self.encoding = encoding

    def path_for(self, namespace: str, filename: str) -> Path:
        parts = [p for p in (namespace or "").split(".") if p]
        return self.root.joinpath(*parts, filename)

    def write_file(self, namespace: str, filename: str, text: str) -> str:
        p = self.path_for(namespace, filename)
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(text, encoding=self.encoding)
        except OSError as e:
            raise ResourceWriteError(namespace=namespace, filename=filename, reason=str(e)) from e
        log.debug(f"Wrote {p}")
        return str(p)


class MemoryWriter(ResourceWriter):
    """Keeps written resources in memory; later writes to the same name replace earlier ones."""

    def __init__(self) -> None:
        self.files: Dict[Tuple[str, str], str] = {}

    def write_file(self, namespace: str, filename: str, text: str) -> str:
        self.files[(namespace, filename)] = text
        return f"{namespace}/{filename}"

    def read(self, namespace: str, filename: str) -> str:
        return self.files[(namespace, filename)]
