"""Public, stable API surface for jenkinsfn.

If you're writing steps or integrating the generator into a build, import from
**`jenkinsfn.core.api`**.

Everything outside this package is considered internal and may change without
notice, even in minor releases.
"""

from __future__ import annotations

# Declaration markers
from jenkinsfn.core.annotations import ArgumentInfo, StepInfo, argument, step
# Common exceptions
from jenkinsfn.core.exception import ManifestError, ResourceWriteError, SourceScanError, StepLoadError
# Settings
from jenkinsfn.core.runtime.settings import Settings, load_settings
# Generator
from jenkinsfn.apt.extractor import decapitalize, extract_step, find_all_fields, render_descriptor
from jenkinsfn.apt.model import ArgumentDeclaration, StepDeclaration
from jenkinsfn.apt.processor import DeclarationResult, PassReport, StepProcessor
from jenkinsfn.apt.providers.base import TypeMetadataProvider
from jenkinsfn.apt.providers.runtime import RuntimeProvider
from jenkinsfn.apt.providers.source import SourceProvider
from jenkinsfn.apt.writer import FilesystemWriter, MemoryWriter, ResourceWriter
# Step invocation contract
from jenkinsfn.loader.function import ArgumentMetadata, ClassStepFunction, StepFunction, StepMetadata
from jenkinsfn.loader.loader import StepFunctionLoader

__all__ = [
    # markers
    "step",
    "argument",
    "StepInfo",
    "ArgumentInfo",
    # exceptions
    "ResourceWriteError",
    "SourceScanError",
    "StepLoadError",
    "ManifestError",
    # settings
    "Settings",
    "load_settings",
    # generator
    "decapitalize",
    "extract_step",
    "find_all_fields",
    "render_descriptor",
    "StepDeclaration",
    "ArgumentDeclaration",
    "StepProcessor",
    "PassReport",
    "DeclarationResult",
    "TypeMetadataProvider",
    "RuntimeProvider",
    "SourceProvider",
    "ResourceWriter",
    "FilesystemWriter",
    "MemoryWriter",
    # invocation
    "StepFunction",
    "StepMetadata",
    "ArgumentMetadata",
    "ClassStepFunction",
    "StepFunctionLoader",
]
