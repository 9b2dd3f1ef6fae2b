from __future__ import annotations

import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType

log = logging.getLogger("jenkinsfn.core.plugins")


def _iter_py_files(root: Path):
    for p in sorted(root.rglob("*.py")):
        if p.name.startswith("_"):
            continue
        yield p


def load_modules(names: list[str], *, strict: bool = True) -> list[ModuleType]:
    """Import modules by dotted name so their step classes can be inspected."""
    modules: list[ModuleType] = []
    for name in names:
        if not name:
            continue
        try:
            modules.append(importlib.import_module(name))
        except Exception as e:
            if strict:
                raise RuntimeError(f"Failed importing step module {name}: {e}") from e
            log.warning(f"Failed importing step module {name}; continuing", exc_info=True)
    return modules


def load_modules_from_paths(paths: list[str], *, strict: bool = True) -> list[ModuleType]:
    """Import every public ``.py`` file below each path.

    The path itself is put on ``sys.path`` so the files can import each other.
    """
    modules: list[ModuleType] = []
    for raw in paths:
        if not raw:
            continue
        root = Path(raw).expanduser().resolve()
        if not root.exists():
            if strict:
                raise FileNotFoundError(f"Step path not found: {root}")
            continue
        if str(root) not in sys.path:
            sys.path.insert(0, str(root))
        for py in _iter_py_files(root):
            rel = py.relative_to(root).with_suffix("")
            mod_name = ".".join(rel.parts)
            try:
                if mod_name in sys.modules:
                    modules.append(sys.modules[mod_name])
                    continue
                spec = importlib.util.spec_from_file_location(mod_name, py)
                if spec and spec.loader:
                    mod = importlib.util.module_from_spec(spec)
                    sys.modules[mod_name] = mod
                    spec.loader.exec_module(mod)
                    modules.append(mod)
            except Exception as e:
                sys.modules.pop(mod_name, None)
                if strict:
                    raise RuntimeError(f"Failed loading step file: {py}: {e}") from e
                log.warning(f"Failed loading step file: {py}; continuing", exc_info=True)
    return modules
