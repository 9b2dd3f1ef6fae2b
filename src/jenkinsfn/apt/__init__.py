"""Build-time step scanner: writes ``<step>.step`` descriptors and the step registry."""

from __future__ import annotations

from jenkinsfn.apt.processor import PassReport, StepProcessor

__all__ = ["StepProcessor", "PassReport"]
