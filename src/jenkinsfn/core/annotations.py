"""Declaration markers for step classes and their arguments.

A step class is marked with the ``step`` decorator, which attaches a
``StepInfo`` record to the class. Argument fields carry an ``ArgumentInfo``
record, either as the field default::

    @step(name="greet")
    class GreetStep:
        target: str = argument(name="who", description="target to greet")

or as ``Annotated`` metadata::

    @step()
    class HelloStep:
        target: Annotated[str, argument(description="who to greet")]

The markers are plain data. They do not change the class; they are only read
by the metadata providers in ``jenkinsfn.apt.providers``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

# Attribute under which the step decorator stores its StepInfo.
STEP_ATTR = "__jenkinsfn_step__"


@dataclass(frozen=True)
class StepInfo:
    name: str = ""


@dataclass(frozen=True)
class ArgumentInfo:
    name: str = ""
    description: str = ""
    default: Any = None


def step(name: str = ""):
    """Mark a class as a step. An empty name means "derive from the class name".

    Usable as ``@step``, ``@step()`` or ``@step(name="...")``.
    """
    if isinstance(name, type):
        return step()(name)
    info = StepInfo(name=name or "")

    def deco(cls):
        setattr(cls, STEP_ATTR, info)
        return cls
    return deco


def argument(name: str = "", description: str = "", default: Any = None) -> ArgumentInfo:
    return ArgumentInfo(name=name or "", description=description or "", default=default)


def get_step_info(cls) -> Optional[StepInfo]:
    """Return the marker declared on ``cls`` itself (markers are not inherited)."""
    info = vars(cls).get(STEP_ATTR) if isinstance(cls, type) else None
    return info if isinstance(info, StepInfo) else None


__all__ = ["STEP_ATTR", "StepInfo", "ArgumentInfo", "step", "argument", "get_step_info"]
