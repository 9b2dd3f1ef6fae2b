from __future__ import annotations

from typing import Any, List, Optional

from jenkinsfn.apt.model import ROOT_TYPE_NAME, ArgumentDeclaration, StepDeclaration
from jenkinsfn.apt.providers.base import TypeMetadataProvider


def decapitalize(name: str) -> str:
    """Bean-style decapitalization: ``FooStep`` -> ``fooStep``, ``URLStep`` unchanged."""
    if not name:
        return name
    if len(name) > 1 and name[0].isupper() and name[1].isupper():
        return name
    return name[0].lower() + name[1:]


def step_name(provider: TypeMetadataProvider, t: Any) -> Optional[str]:
    info = provider.step_info(t)
    if info is None:
        return None
    return info.name or decapitalize(provider.simple_name(t))


def find_all_fields(provider: TypeMetadataProvider, t: Any) -> List[Any]:
    """Own fields of ``t`` followed by those of each superclass up to the root sentinel."""
    all_fields: List[Any] = []
    seen: List[Any] = []
    current = t
    while True:
        seen.append(current)
        all_fields.extend(provider.declared_fields(current))
        sup = provider.superclass(current)
        if sup is None:
            break
        sup_name = provider.qualified_name(sup)
        if not sup_name or sup_name == ROOT_TYPE_NAME:
            break
        if any(s is sup for s in seen):
            # cyclic bases (only possible in scanned source)
            break
        current = sup
    return all_fields


def extract_arguments(provider: TypeMetadataProvider, t: Any) -> List[ArgumentDeclaration]:
    arguments: List[ArgumentDeclaration] = []
    for f in find_all_fields(provider, t):
        info = provider.argument_info(f)
        if info is None:
            continue
        field_name = provider.field_name(f)
        arg_name = info.name or field_name
        if not arg_name:
            continue
        arguments.append(
            ArgumentDeclaration(
                name=arg_name,
                description=info.description or None,
                type_name=provider.field_type_name(f) or None,
                field=field_name,
            )
        )
    return arguments


def extract_step(provider: TypeMetadataProvider, t: Any) -> Optional[StepDeclaration]:
    """Build the declaration of a step type; None when ``t`` has no step marker."""
    name = step_name(provider, t)
    if name is None:
        return None
    return StepDeclaration(
        name=name,
        type_name=provider.qualified_name(t) or "",
        arguments=extract_arguments(provider, t),
    )


def render_descriptor(decl: StepDeclaration) -> str:
    parts = [
        "step {\n"
        "  metadata {\n"
        f"    name '{decl.name}'\n"
        "  }\n"
        "  args {\n"
    ]
    for arg in decl.arguments:
        parts.append("    arg {\n" f"      name '{arg.name}'\n")
        if arg.description:
            parts.append(f"      description '{arg.description}'\n")
        if arg.type_name:
            parts.append(f"      className '{arg.type_name}'\n")
        parts.append("    }\n")
    parts.append(
        "  }\n"
        "  steps {\n"
        f"    javaStepFunction  '{decl.name} ${{args}}'\n"
        "  }\n"
        "}\n"
    )
    return "".join(parts)
