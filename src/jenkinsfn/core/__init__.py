"""jenkinsfn core package.

Public entrypoints:
- jenkinsfn.core.api: stable API surface for step authors and integrations
- jenkinsfn.core.annotations: the ``step`` / ``argument`` markers

Internal modules may change without notice.
"""

from __future__ import annotations

from jenkinsfn.core.annotations import argument, step

__all__ = ["step", "argument"]
