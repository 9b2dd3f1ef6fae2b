from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Dict, Mapping

from jenkinsfn.core.exception import StepLoadError
from jenkinsfn.core.properties import load_properties
from jenkinsfn.loader.function import ClassStepFunction, StepFunction

log = logging.getLogger("jenkinsfn.loader.loader")


def import_type(type_name: str) -> type:
    """Import ``package.module.Outer.Inner`` by trying the longest importable module prefix."""
    parts = type_name.split(".")
    for i in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:i])
        try:
            obj = importlib.import_module(module_name)
        except ModuleNotFoundError as e:
            # Only keep searching when the missing module is the candidate itself.
            if e.name and (module_name == e.name or module_name.startswith(e.name + ".")):
                continue
            raise StepLoadError(f"Failed importing {module_name} for {type_name}: {e}") from e
        except Exception as e:
            raise StepLoadError(f"Failed importing {module_name} for {type_name}: {e}") from e
        try:
            for attr in parts[i:]:
                obj = getattr(obj, attr)
        except AttributeError as e:
            raise StepLoadError(f"{type_name} not found in {module_name}") from e
        if not isinstance(obj, type):
            raise StepLoadError(f"{type_name} is not a class")
        return obj
    raise StepLoadError(f"Cannot import step type {type_name}")


class StepFunctionLoader:
    """Resolves step names from a step registry to StepFunction instances.

    Loaded functions are cached per name.
    """

    def __init__(self, registry: Mapping[str, str]):
        self._registry: Dict[str, str] = dict(registry)
        self._loaded: Dict[str, StepFunction] = {}

    @classmethod
    def from_text(cls, text: str) -> "StepFunctionLoader":
        return cls(load_properties(text))

    @classmethod
    def from_file(cls, path: str | Path) -> "StepFunctionLoader":
        return cls.from_text(Path(path).read_text(encoding="utf-8"))

    def list(self) -> list[str]:
        return sorted(self._registry.keys())

    def type_name(self, name: str) -> str:
        if name not in self._registry:
            raise KeyError(f"Unknown step: {name}. Loaded: {self.list()}")
        return self._registry[name]

    def get(self, name: str) -> StepFunction:
        if name in self._loaded:
            return self._loaded[name]
        type_name = self.type_name(name)
        try:
            fn = ClassStepFunction(import_type(type_name))
        except TypeError as e:
            raise StepLoadError(f"Step {name} ({type_name}) cannot be loaded: {e}") from e
        log.debug(f"Loaded step {name} from {type_name}")
        self._loaded[name] = fn
        return fn
