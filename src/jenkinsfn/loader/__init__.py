"""Runtime side: the StepFunction contract and the step registry loader."""

from __future__ import annotations

from jenkinsfn.loader.function import ArgumentMetadata, ClassStepFunction, StepFunction, StepMetadata
from jenkinsfn.loader.loader import StepFunctionLoader

__all__ = ["StepFunction", "StepMetadata", "ArgumentMetadata", "ClassStepFunction", "StepFunctionLoader"]
