"""One generation pass: descriptors per step plus the shared step registry.

Every declaration is processed independently. A declaration that cannot be
extracted or written is recorded in the PassReport and logged; it never stops
the pass. The registry is written once at the end, and only when at least one
step was found.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from jenkinsfn.apt.extractor import extract_step, render_descriptor
from jenkinsfn.apt.providers.base import TypeMetadataProvider
from jenkinsfn.apt.writer import ResourceWriter
from jenkinsfn.core.observability import PassObserver
from jenkinsfn.core.properties import store_properties
from jenkinsfn.core.runtime.settings import Settings

log = logging.getLogger("jenkinsfn.apt.processor")

# Declaration outcomes.
STEP_WRITTEN = "WRITTEN"
STEP_WRITE_ERROR = "WRITE_ERROR"
STEP_FAILED = "FAILED"

# Registry outcomes.
REGISTRY_WRITTEN = "WRITTEN"
REGISTRY_WRITE_ERROR = "WRITE_ERROR"
REGISTRY_SKIPPED_EMPTY = "SKIPPED_EMPTY"


@dataclass
class DeclarationResult:
    type_name: str
    status: str
    step_name: Optional[str] = None
    location: Optional[str] = None
    error: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "type_name": self.type_name,
            "step_name": self.step_name,
            "status": self.status,
            "location": self.location,
            "error": self.error,
        }


@dataclass
class PassReport:
    results: List[DeclarationResult] = field(default_factory=list)
    registry: Dict[str, str] = field(default_factory=dict)
    registry_status: str = REGISTRY_SKIPPED_EMPTY
    registry_location: Optional[str] = None
    registry_error: Optional[str] = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.registry_status != REGISTRY_WRITE_ERROR and all(r.status == STEP_WRITTEN for r in self.results)

    def status_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for r in self.results:
            counts[r.status] = counts.get(r.status, 0) + 1
        return counts

    def as_dict(self) -> dict:
        return {
            "ok": self.ok,
            "duration_ms": self.duration_ms,
            "status_counts": self.status_counts(),
            "registry": {
                "status": self.registry_status,
                "location": self.registry_location,
                "error": self.registry_error,
                "entries": dict(sorted(self.registry.items())),
            },
            "steps": [r.as_dict() for r in self.results],
        }


class StepProcessor:
    def __init__(self, writer: ResourceWriter, *, settings: Optional[Settings] = None, timestamp: Optional[datetime] = None):
        self.writer = writer
        self.settings = settings or Settings()
        self.timestamp = timestamp
        self.observer = PassObserver(settings=self.settings, logger=log)

    def process(self, *providers: TypeMetadataProvider) -> PassReport:
        """Run one pass over every step type the providers discover."""
        report = PassReport()
        self.observer.pass_start(providers=len(providers), namespace=self.settings.namespace)
        for provider in providers:
            try:
                found = provider.discover()
            except Exception as e:
                label = type(provider).__name__
                log.warning(f"Discovery failed in {label}; continuing", exc_info=True)
                self.observer.event("discover_failed", level=logging.WARNING, provider=label, error=str(e))
                report.results.append(DeclarationResult(type_name=label, status=STEP_FAILED, error=str(e)))
                continue
            for t in found:
                report.results.append(self.process_step(provider, t, report.registry))
        self._write_registry(report)
        report.duration_ms = self.observer.pass_end(
            summary={
                "status_counts": report.status_counts(),
                "registry_status": report.registry_status,
                "registry_entries": len(report.registry),
            }
        )
        return report

    def process_step(self, provider: TypeMetadataProvider, t: Any, registry: Dict[str, str]) -> DeclarationResult:
        type_label = repr(t)
        try:
            type_label = provider.describe(t)
            decl = extract_step(provider, t)
            if decl is None:
                return DeclarationResult(type_name=type_label, status=STEP_FAILED, error="no step marker")
            if decl.name in registry:
                self.observer.event(
                    "registry_overwrite", level=logging.DEBUG, step=decl.name, previous=registry[decl.name], type=decl.type_name
                )
            registry[decl.name] = decl.type_name
            text = render_descriptor(decl)
        except Exception as e:
            log.warning(f"Failed extracting step from {type_label}; continuing", exc_info=True)
            self.observer.event("step_failed", level=logging.WARNING, type=type_label, error=str(e))
            return DeclarationResult(type_name=type_label, status=STEP_FAILED, error=str(e))

        filename = decl.name + self.settings.descriptor_suffix
        try:
            location = self.writer.write_file(self.settings.namespace, filename, text)
        except OSError as e:
            log.error(f"Failed writing descriptor {filename} for {decl.type_name}", exc_info=True)
            self.observer.event("step_write_error", level=logging.ERROR, step=decl.name, type=decl.type_name, error=str(e))
            return DeclarationResult(type_name=decl.type_name, step_name=decl.name, status=STEP_WRITE_ERROR, error=str(e))
        except Exception as e:
            log.warning(f"Unexpected failure writing {filename}; continuing", exc_info=True)
            return DeclarationResult(type_name=decl.type_name, step_name=decl.name, status=STEP_FAILED, error=str(e))

        self.observer.event("step_written", step=decl.name, type=decl.type_name, args=len(decl.arguments))
        return DeclarationResult(type_name=decl.type_name, step_name=decl.name, status=STEP_WRITTEN, location=location)

    def _write_registry(self, report: PassReport) -> None:
        if not report.registry:
            report.registry_status = REGISTRY_SKIPPED_EMPTY
            return
        text = store_properties(
            report.registry,
            comment=self.settings.registry_comment,
            timestamp=self.timestamp,
            with_timestamp=self.settings.registry_timestamp,
        )
        try:
            report.registry_location = self.writer.write_file(self.settings.namespace, self.settings.registry_file, text)
            report.registry_status = REGISTRY_WRITTEN
            self.observer.event("registry_written", location=report.registry_location, entries=len(report.registry))
        except OSError as e:
            log.error(f"Failed writing step registry {self.settings.registry_file}", exc_info=True)
            report.registry_status = REGISTRY_WRITE_ERROR
            report.registry_error = str(e)
