"""Metadata provider over imported classes.

Fields are a class's own annotations in declaration order, followed by
unannotated class attributes whose value is an ``argument(...)`` marker.
String annotations (``from __future__ import annotations``) are resolved with
``typing.get_type_hints`` against the defining module and the owning class;
when that fails the field keeps no type. Nested classes are discovered under
their dotted ``__qualname__``.
"""

from __future__ import annotations

import inspect
import logging
import sys
from dataclasses import dataclass
from types import ModuleType
from typing import Annotated, Any, Iterable, List, Optional, get_args, get_origin, get_type_hints

from jenkinsfn.apt.providers.base import TypeMetadataProvider
from jenkinsfn.core.annotations import ArgumentInfo, StepInfo, get_step_info

log = logging.getLogger("jenkinsfn.apt.providers.runtime")

_MISSING = object()


@dataclass(frozen=True)
class RuntimeField:
    owner: type
    name: str
    annotation: Any = _MISSING
    value: Any = _MISSING


def _own_annotations(cls: type) -> dict:
    try:
        return dict(inspect.get_annotations(cls))
    except NameError:
        # Lazily evaluated annotations with an unresolvable name; read them as strings.
        try:
            import annotationlib
        except ImportError:
            return {}
        return dict(annotationlib.get_annotations(cls, format=annotationlib.Format.STRING))


def type_name_of(tp: Any) -> Optional[str]:
    """Fully qualified name of an annotation, or None when it cannot be resolved."""
    if tp is _MISSING or tp is None:
        return None
    if get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    if tp is None or tp is type(None):
        return None
    if isinstance(tp, str):
        return None
    if isinstance(tp, type) and get_origin(tp) is None:
        return f"{tp.__module__}.{tp.__qualname__}"
    text = repr(tp)
    return text or None


class RuntimeProvider(TypeMetadataProvider[type, RuntimeField]):
    def __init__(self, *, modules: Iterable[ModuleType] = (), classes: Iterable[type] = ()):
        self.modules = list(modules)
        self.classes = list(classes)

    def discover(self) -> List[type]:
        found: List[type] = []

        def visit(cls: type) -> None:
            if get_step_info(cls) is not None and cls not in found:
                found.append(cls)
            prefix = f"{cls.__qualname__}."
            for obj in vars(cls).values():
                if isinstance(obj, type) and obj.__module__ == cls.__module__ and obj.__qualname__.startswith(prefix):
                    visit(obj)

        for cls in self.classes:
            if get_step_info(cls) is not None and cls not in found:
                found.append(cls)
        for mod in self.modules:
            for obj in vars(mod).values():
                if isinstance(obj, type) and obj.__module__ == mod.__name__:
                    visit(obj)
        return found

    def step_info(self, t: type) -> Optional[StepInfo]:
        return get_step_info(t)

    def simple_name(self, t: type) -> str:
        return getattr(t, "__name__", "") or ""

    def qualified_name(self, t: type) -> Optional[str]:
        qualname = getattr(t, "__qualname__", None)
        if not qualname:
            return None
        module = getattr(t, "__module__", None)
        return f"{module}.{qualname}" if module else qualname

    def declared_fields(self, t: type) -> List[RuntimeField]:
        own = vars(t)
        position = {name: i for i, name in enumerate(own)}
        annotations = _own_annotations(t)
        # Unannotated markers are slotted in before the first annotated field defined after them.
        pending = [n for n, v in own.items() if n not in annotations and isinstance(v, ArgumentInfo)]
        fields: List[RuntimeField] = []
        for name, ann in annotations.items():
            if name in position:
                while pending and position[pending[0]] < position[name]:
                    n = pending.pop(0)
                    fields.append(RuntimeField(t, n, _MISSING, own[n]))
            fields.append(RuntimeField(t, name, ann, own.get(name, _MISSING)))
        fields.extend(RuntimeField(t, n, _MISSING, own[n]) for n in pending)
        return fields

    def superclass(self, t: type) -> Optional[type]:
        bases = getattr(t, "__bases__", ())
        return bases[0] if bases else None

    def argument_info(self, field: RuntimeField) -> Optional[ArgumentInfo]:
        if isinstance(field.value, ArgumentInfo):
            return field.value
        ann = self._resolve(field)
        if get_origin(ann) is Annotated:
            for meta in get_args(ann)[1:]:
                if isinstance(meta, ArgumentInfo):
                    return meta
        return None

    def field_name(self, field: RuntimeField) -> str:
        return field.name

    def field_type_name(self, field: RuntimeField) -> Optional[str]:
        return type_name_of(self._resolve(field))

    def _resolve(self, field: RuntimeField) -> Any:
        ann = field.annotation
        if not isinstance(ann, str):
            return ann
        module = sys.modules.get(field.owner.__module__)
        ns = dict(vars(module)) if module is not None else {}
        holder = type("_FieldHint", (), {"__annotations__": {field.name: ann}})
        try:
            hints = get_type_hints(holder, globalns=ns, localns=dict(vars(field.owner)), include_extras=True)
            return hints[field.name]
        except Exception:
            log.debug(f"Cannot resolve annotation {ann!r} of {field.owner.__qualname__}.{field.name}")
            return _MISSING
