from __future__ import annotations

import abc
import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from jenkinsfn.apt.extractor import extract_step, find_all_fields
from jenkinsfn.apt.providers.runtime import RuntimeProvider

log = logging.getLogger("jenkinsfn.loader.function")


class ArgumentMetadata(BaseModel):
    name: str
    description: Optional[str] = None
    class_name: Optional[str] = None


class StepMetadata(BaseModel):
    name: str
    type_name: Optional[str] = None
    arguments: List[ArgumentMetadata] = Field(default_factory=list)

    def argument(self, name: str) -> Optional[ArgumentMetadata]:
        for arg in self.arguments:
            if arg.name == name:
                return arg
        return None


class StepFunction(abc.ABC):
    """A step implementation the host runtime can invoke."""

    @abc.abstractmethod
    def invoke(self, arguments: Mapping[str, Any]) -> Any:
        """Invoke the step function with optional arguments by name and return its result."""
        raise NotImplementedError

    @abc.abstractmethod
    def get_metadata(self) -> StepMetadata:
        raise NotImplementedError


class ClassStepFunction(StepFunction):
    """Adapts a ``@step`` class to the StepFunction contract.

    Each invocation creates a fresh instance, assigns every declared argument
    to its field (missing ones get the marker's default) and calls ``run()``,
    or the instance itself when the class defines no ``run``.
    """

    def __init__(self, cls: type):
        self.cls = cls
        self._provider = RuntimeProvider(classes=[cls])
        decl = extract_step(self._provider, cls)
        if decl is None:
            raise TypeError(f"{cls.__module__}.{cls.__qualname__} is not marked with @step")
        self._decl = decl
        # Marker defaults per field, subclass declarations first.
        self._defaults: Dict[str, Any] = {}
        for f in find_all_fields(self._provider, cls):
            info = self._provider.argument_info(f)
            name = self._provider.field_name(f)
            if info is not None and name not in self._defaults:
                self._defaults[name] = info.default

    def get_metadata(self) -> StepMetadata:
        return StepMetadata(
            name=self._decl.name,
            type_name=self._decl.type_name,
            arguments=[
                ArgumentMetadata(name=a.name, description=a.description, class_name=a.type_name)
                for a in self._decl.arguments
            ],
        )

    def _default_for(self, field_name: str) -> Any:
        return self._defaults.get(field_name)

    def invoke(self, arguments: Mapping[str, Any]) -> Any:
        arguments = dict(arguments or {})
        instance = self.cls()
        known = set()
        for arg in self._decl.arguments:
            known.add(arg.name)
            value = arguments[arg.name] if arg.name in arguments else self._default_for(arg.field)
            setattr(instance, arg.field, value)
        unknown = sorted(set(arguments) - known)
        if unknown:
            log.debug(f"Step {self._decl.name} ignores unknown arguments: {unknown}")
        run = getattr(instance, "run", None)
        if callable(run):
            return run()
        if callable(instance):
            return instance()
        raise TypeError(f"Step {self._decl.name} defines neither run() nor __call__()")
