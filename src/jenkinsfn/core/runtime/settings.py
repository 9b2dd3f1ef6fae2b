from __future__ import annotations

import os
from importlib import import_module

from pydantic import BaseModel


def _flag(value: str | None, default: str) -> bool:
    return (value or default).lower() == "true"


class Settings(BaseModel):
    # Defaults are static. Use load_settings(env=...) to read from an env snapshot.
    output_root: str = "build/generated"

    # Logical namespace of the generated resources; dots map to directories.
    namespace: str = "io.jenkins.functions"
    registry_file: str = "steps.properties"
    registry_comment: str = "Generated by jenkinsfn-apt"
    # Java's Properties.store writes a date line under the comment. Turn off for
    # byte-reproducible output.
    registry_timestamp: bool = True
    descriptor_suffix: str = ".step"

    # When false, modules that fail to import are logged and skipped.
    module_strict: bool = True

    log_level: str = "INFO"
    # - log_format: "text" (default) or "json". When json, jenkinsfn logs emit a single JSON
    #   object per line, suitable for log aggregation.
    log_format: str = "text"

    @classmethod
    def from_env(cls, env: dict[str, str], overrides: dict | None = None) -> "Settings":
        """Build Settings from an explicit env snapshot (does not read os.environ)."""
        def g(key: str, default: str | None = None) -> str | None:
            return env.get(key, default)

        data = {
            "output_root": g("JENKINSFN_OUTPUT_ROOT", "build/generated"),
            "namespace": g("JENKINSFN_NAMESPACE", "io.jenkins.functions"),
            "registry_file": g("JENKINSFN_REGISTRY_FILE", "steps.properties"),
            "registry_comment": g("JENKINSFN_REGISTRY_COMMENT", "Generated by jenkinsfn-apt"),
            "registry_timestamp": _flag(g("JENKINSFN_REGISTRY_TIMESTAMP"), "true"),
            "descriptor_suffix": g("JENKINSFN_DESCRIPTOR_SUFFIX", ".step"),
            "module_strict": _flag(g("JENKINSFN_MODULE_STRICT"), "true"),
            "log_level": g("JENKINSFN_LOG_LEVEL", "INFO"),
            "log_format": g("JENKINSFN_LOG_FORMAT", "text"),
        }
        if overrides:
            data.update(overrides)
        return cls(**data)


def load_settings(overrides: dict | None = None, *, env: dict[str, str] | None = None) -> Settings:
    """Load settings from (1) env snapshot, (2) optional settings module, (3) explicit overrides.

    If env is not provided, a snapshot is built from os.environ.
    """
    env2 = {k: str(v) for k, v in os.environ.items()} if env is None else env
    s = Settings.from_env(env2)
    mod = env2.get("JENKINSFN_SETTINGS_MODULE")
    if mod:
        m = import_module(mod)
        data = getattr(m, "SETTINGS", {})
        if not isinstance(data, dict):
            raise TypeError("JENKINSFN_SETTINGS_MODULE must expose SETTINGS: dict")
        s = s.model_copy(update=data)
    if overrides:
        s = s.model_copy(update=overrides)
    return s
