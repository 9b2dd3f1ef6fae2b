from __future__ import annotations

import abc
from typing import Any, Generic, List, Optional, TypeVar

from jenkinsfn.core.annotations import ArgumentInfo, StepInfo

T = TypeVar("T")
F = TypeVar("F")


class TypeMetadataProvider(abc.ABC, Generic[T, F]):
    """Read-only reflection queries used by the extractor.

    ``T`` is the provider's type handle (a live class, a parsed class, ...)
    and ``F`` its field handle. Lookups that cannot be answered return
    ``None`` or an empty value; they never raise.
    """

    @abc.abstractmethod
    def discover(self) -> List[T]:
        """Types visible to this provider that carry a step marker, in a stable order."""
        raise NotImplementedError

    @abc.abstractmethod
    def step_info(self, t: T) -> Optional[StepInfo]:
        raise NotImplementedError

    @abc.abstractmethod
    def simple_name(self, t: T) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    def qualified_name(self, t: T) -> Optional[str]:
        raise NotImplementedError

    @abc.abstractmethod
    def declared_fields(self, t: T) -> List[F]:
        """Fields declared on ``t`` itself, in declaration order."""
        raise NotImplementedError

    @abc.abstractmethod
    def superclass(self, t: T) -> Optional[T]:
        """The declared superclass, or None when there is none or it cannot be resolved."""
        raise NotImplementedError

    @abc.abstractmethod
    def argument_info(self, field: F) -> Optional[ArgumentInfo]:
        raise NotImplementedError

    @abc.abstractmethod
    def field_name(self, field: F) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    def field_type_name(self, field: F) -> Optional[str]:
        raise NotImplementedError

    def describe(self, t: Any) -> str:
        return self.qualified_name(t) or self.simple_name(t) or repr(t)
