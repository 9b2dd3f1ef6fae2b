"""Metadata provider over Python source files (static analysis, nothing is imported).

Every ``.py`` file below the configured roots is parsed with ``ast``. Module
names follow the file layout relative to the root (``pkg/mod.py`` is
``pkg.mod``). Markers are recognised by the called name: a class decorator
named ``step`` and field values or ``Annotated`` metadata calls named
``argument``. Marker arguments must be literals; anything else counts as not
given.

Names are resolved through the module's imports, its own top-level
definitions and the builtins. A superclass that resolves to a class outside
the scanned roots ends the field walk.
"""

from __future__ import annotations

import ast
import builtins
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from jenkinsfn.apt.providers.base import TypeMetadataProvider
from jenkinsfn.core.annotations import ArgumentInfo, StepInfo
from jenkinsfn.core.exception import SourceScanError

log = logging.getLogger("jenkinsfn.apt.providers.source")

_BUILTIN_NAMES = frozenset(dir(builtins))
_STEP_MARKER = "step"
_ARGUMENT_MARKER = "argument"


class _Unresolved(Exception):
    pass


@dataclass
class SourceModule:
    name: str
    path: Path
    imports: Dict[str, str] = field(default_factory=dict)
    defined: set = field(default_factory=set)


@dataclass(eq=False)
class SourceClass:
    module: SourceModule
    qualname: str
    node: ast.ClassDef


@dataclass(frozen=True, eq=False)
class SourceField:
    owner: SourceClass
    name: str
    annotation: Optional[ast.expr] = None
    value: Optional[ast.expr] = None


def _module_name(root: Path, path: Path) -> str:
    parts = list(path.relative_to(root).with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(parts)


def _dotted(node: ast.AST) -> Optional[str]:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        head = _dotted(node.value)
        return f"{head}.{node.attr}" if head else None
    return None


def _callee_name(node: ast.AST) -> Optional[str]:
    target = node.func if isinstance(node, ast.Call) else node
    dotted = _dotted(target)
    return dotted.rsplit(".", 1)[-1] if dotted else None


def _literal(node: Optional[ast.AST], default: Any = "") -> Any:
    if node is None:
        return default
    try:
        return ast.literal_eval(node)
    except (ValueError, TypeError, SyntaxError, MemoryError, RecursionError):
        return default


def _call_args(call: ast.Call, names: List[str]) -> Dict[str, ast.AST]:
    out: Dict[str, ast.AST] = {}
    for pos, arg in zip(names, call.args):
        out[pos] = arg
    for kw in call.keywords:
        if kw.arg in names:
            out[kw.arg] = kw.value
    return out


def _str_literal(node: Optional[ast.AST]) -> str:
    value = _literal(node, "")
    return value if isinstance(value, str) else ""


def _parse_string_annotation(node: ast.expr) -> Optional[ast.expr]:
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        try:
            return ast.parse(node.value, mode="eval").body
        except SyntaxError:
            return None
    return node


class SourceProvider(TypeMetadataProvider[SourceClass, SourceField]):
    def __init__(self, roots: Iterable[str]):
        self.roots = [Path(r).expanduser().resolve() for r in roots if r]
        self._classes: Dict[str, SourceClass] = {}
        self._scanned = False

    # -- scanning ---------------------------------------------------------

    def _scan(self) -> None:
        if self._scanned:
            return
        self._scanned = True
        for root in self.roots:
            if not root.is_dir():
                log.warning(f"Source root not found: {root}")
                continue
            for path in sorted(root.rglob("*.py")):
                name = _module_name(root, path)
                if not name:
                    continue
                try:
                    tree = self._parse(path)
                except SourceScanError as e:
                    log.warning(f"{e}; skipping")
                    continue
                self._index_module(SourceModule(name=name, path=path), tree, is_package=path.name == "__init__.py")

    @staticmethod
    def _parse(path: Path) -> ast.Module:
        try:
            return ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        except (SyntaxError, UnicodeDecodeError, OSError) as e:
            raise SourceScanError(path=str(path), reason=str(e)) from e

    def _index_module(self, module: SourceModule, tree: ast.Module, *, is_package: bool) -> None:
        package = module.name if is_package else module.name.rpartition(".")[0]
        for stmt in ast.walk(tree):
            if isinstance(stmt, ast.Import):
                for alias in stmt.names:
                    if alias.asname:
                        module.imports[alias.asname] = alias.name
                    else:
                        head = alias.name.split(".", 1)[0]
                        module.imports[head] = head
            elif isinstance(stmt, ast.ImportFrom):
                base = stmt.module or ""
                if stmt.level:
                    parts = package.split(".") if package else []
                    keep = len(parts) - (stmt.level - 1)
                    prefix = ".".join(parts[:max(keep, 0)])
                    base = ".".join(p for p in (prefix, base) if p)
                for alias in stmt.names:
                    if alias.name == "*":
                        continue
                    module.imports[alias.asname or alias.name] = f"{base}.{alias.name}" if base else alias.name

        for stmt in tree.body:
            if isinstance(stmt, (ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
                module.defined.add(stmt.name)
            elif isinstance(stmt, ast.Assign):
                module.defined.update(t.id for t in stmt.targets if isinstance(t, ast.Name))
            elif isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
                module.defined.add(stmt.target.id)

        def collect(body: List[ast.stmt], prefix: str) -> None:
            for stmt in body:
                if isinstance(stmt, ast.ClassDef):
                    qualname = f"{prefix}{stmt.name}"
                    self._classes[f"{module.name}.{qualname}"] = SourceClass(module, qualname, stmt)
                    collect(stmt.body, f"{qualname}.")

        collect(tree.body, "")

    # -- name resolution ----------------------------------------------------

    def _resolve_ref(self, module: SourceModule, node: ast.AST) -> Optional[str]:
        dotted = _dotted(node)
        if dotted is None:
            return None
        head, _, rest = dotted.partition(".")
        if head in module.imports:
            base = module.imports[head]
        elif head in module.defined:
            base = f"{module.name}.{head}"
        elif head in _BUILTIN_NAMES:
            base = f"builtins.{head}"
        else:
            return None
        return f"{base}.{rest}" if rest else base

    def _is_annotated(self, module: SourceModule, node: ast.AST) -> bool:
        if not isinstance(node, ast.Subscript):
            return False
        ref = self._resolve_ref(module, node.value)
        return ref in ("typing.Annotated", "typing_extensions.Annotated")

    def _render(self, module: SourceModule, node: ast.expr) -> Optional[str]:
        provider = self

        class _Qualify(ast.NodeTransformer):
            def _replace(self, n: ast.AST) -> ast.AST:
                ref = provider._resolve_ref(module, n)
                if ref is None:
                    raise _Unresolved(ast.unparse(n))
                if ref.startswith("builtins."):
                    ref = ref[len("builtins."):]
                return ast.copy_location(ast.Name(id=ref, ctx=ast.Load()), n)

            def visit_Name(self, n: ast.Name) -> ast.AST:
                return self._replace(n)

            def visit_Attribute(self, n: ast.Attribute) -> ast.AST:
                return self._replace(n)

        if isinstance(node, (ast.Name, ast.Attribute)):
            return self._resolve_ref(module, node)
        try:
            return ast.unparse(_Qualify().visit(ast.parse(ast.unparse(node), mode="eval").body))
        except _Unresolved:
            return None

    # -- TypeMetadataProvider ----------------------------------------------------

    def discover(self) -> List[SourceClass]:
        self._scan()
        return [c for c in self._classes.values() if self.step_info(c) is not None]

    def get(self, qualified_name: str) -> Optional[SourceClass]:
        self._scan()
        return self._classes.get(qualified_name)

    def step_info(self, t: SourceClass) -> Optional[StepInfo]:
        for deco in t.node.decorator_list:
            if _callee_name(deco) != _STEP_MARKER:
                continue
            if isinstance(deco, ast.Call):
                args = _call_args(deco, ["name"])
                return StepInfo(name=_str_literal(args.get("name")))
            return StepInfo()
        return None

    def simple_name(self, t: SourceClass) -> str:
        return t.node.name

    def qualified_name(self, t: SourceClass) -> Optional[str]:
        return f"{t.module.name}.{t.qualname}"

    def declared_fields(self, t: SourceClass) -> List[SourceField]:
        fields: List[SourceField] = []
        for stmt in t.node.body:
            if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
                fields.append(SourceField(t, stmt.target.id, stmt.annotation, stmt.value))
            elif (
                isinstance(stmt, ast.Assign)
                and len(stmt.targets) == 1
                and isinstance(stmt.targets[0], ast.Name)
                and isinstance(stmt.value, ast.Call)
                and _callee_name(stmt.value) == _ARGUMENT_MARKER
            ):
                fields.append(SourceField(t, stmt.targets[0].id, None, stmt.value))
        return fields

    def superclass(self, t: SourceClass) -> Optional[SourceClass]:
        if not t.node.bases:
            return None
        base = t.node.bases[0]
        if isinstance(base, ast.Subscript):
            base = base.value
        ref = self._resolve_ref(t.module, base)
        if ref is None:
            return None
        return self.get(ref)

    def argument_info(self, field: SourceField) -> Optional[ArgumentInfo]:
        if isinstance(field.value, ast.Call) and _callee_name(field.value) == _ARGUMENT_MARKER:
            return self._argument_from_call(field.value)
        ann = _parse_string_annotation(field.annotation) if field.annotation is not None else None
        if ann is not None and self._is_annotated(field.owner.module, ann):
            elts = ann.slice.elts if isinstance(ann.slice, ast.Tuple) else [ann.slice]
            for meta in elts[1:]:
                if isinstance(meta, ast.Call) and _callee_name(meta) == _ARGUMENT_MARKER:
                    return self._argument_from_call(meta)
        return None

    @staticmethod
    def _argument_from_call(call: ast.Call) -> ArgumentInfo:
        args = _call_args(call, ["name", "description", "default"])
        return ArgumentInfo(
            name=_str_literal(args.get("name")),
            description=_str_literal(args.get("description")),
            default=_literal(args.get("default"), None),
        )

    def field_name(self, field: SourceField) -> str:
        return field.name

    def field_type_name(self, field: SourceField) -> Optional[str]:
        if field.annotation is None:
            return None
        module = field.owner.module
        ann = _parse_string_annotation(field.annotation)
        if ann is None:
            return None
        if self._is_annotated(module, ann):
            elts = ann.slice.elts if isinstance(ann.slice, ast.Tuple) else [ann.slice]
            ann = _parse_string_annotation(elts[0])
            if ann is None:
                return None
        if isinstance(ann, ast.Constant) and ann.value is None:
            # A bare None annotation names no class.
            return None
        return self._render(module, ann)
