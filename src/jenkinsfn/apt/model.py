from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

# Qualified name of the root sentinel type. Field flattening stops here.
ROOT_TYPE_NAME = "builtins.object"


class ArgumentDeclaration(BaseModel):
    name: str
    description: Optional[str] = None
    type_name: Optional[str] = None
    # Python attribute the argument was derived from.
    field: str


class StepDeclaration(BaseModel):
    name: str
    type_name: str
    arguments: List[ArgumentDeclaration] = Field(default_factory=list)


__all__ = ["ROOT_TYPE_NAME", "ArgumentDeclaration", "StepDeclaration"]
