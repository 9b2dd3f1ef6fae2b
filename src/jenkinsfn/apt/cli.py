import argparse
import json
import sys

from jenkinsfn.apt.extractor import extract_step
from jenkinsfn.apt.processor import StepProcessor
from jenkinsfn.apt.providers.runtime import RuntimeProvider
from jenkinsfn.apt.providers.source import SourceProvider
from jenkinsfn.apt.spec import ScanManifestSpec, load_manifest
from jenkinsfn.apt.writer import FilesystemWriter
from jenkinsfn.core.exception import ManifestError
from jenkinsfn.core.observability import ensure_logging
from jenkinsfn.core.plugins import load_modules, load_modules_from_paths
from jenkinsfn.core.runtime.settings import load_settings


def _add_discovery_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--manifest", default=None, help="Path to scan manifest YAML")
    p.add_argument("--source", action="append", default=[], help="Source root scanned statically (repeatable)")
    p.add_argument("--module", action="append", default=[], help="Dotted module name to import (repeatable)")
    p.add_argument("--path", action="append", default=[], help="Directory of .py files to import (repeatable)")
    p.add_argument("--json", action="store_true", help="Output machine-readable JSON")


def _build(args):
    manifest = load_manifest(args.manifest) if args.manifest else ScanManifestSpec()
    overrides = {}
    output_root = getattr(args, "output", None) or manifest.output_root
    if output_root:
        overrides["output_root"] = output_root
    namespace = getattr(args, "namespace", None) or manifest.namespace
    if namespace:
        overrides["namespace"] = namespace
    if getattr(args, "no_timestamp", False):
        overrides["registry_timestamp"] = False
    settings = load_settings(overrides)

    providers = []
    sources = list(manifest.sources) + list(args.source)
    if sources:
        providers.append(SourceProvider(sources))
    loaded = load_modules_from_paths(list(manifest.paths) + list(args.path), strict=settings.module_strict)
    loaded += load_modules(list(manifest.modules) + list(args.module), strict=settings.module_strict)
    if loaded:
        providers.append(RuntimeProvider(modules=loaded))
    return settings, providers


def main(argv=None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = argparse.ArgumentParser(prog="jenkinsfn-apt", description="Generate step descriptors and the step registry")
    sp = parser.add_subparsers(dest="cmd", required=True)

    genp = sp.add_parser("generate", help="Write <step>.step descriptors and the step registry")
    _add_discovery_args(genp)
    genp.add_argument("--output", default=None, help="Output root (defaults to JENKINSFN_OUTPUT_ROOT or settings)")
    genp.add_argument("--namespace", default=None, help="Resource namespace (dots become directories)")
    genp.add_argument("--no-timestamp", action="store_true", help="Omit the date comment from the registry")
    genp.add_argument("--strict", action="store_true", help="Exit 2 if any declaration or the registry failed")

    listp = sp.add_parser("list", help="List discovered steps without writing anything")
    _add_discovery_args(listp)

    args = parser.parse_args(argv)
    try:
        settings, providers = _build(args)
    except ManifestError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    ensure_logging(settings)

    if args.cmd == "generate":
        processor = StepProcessor(FilesystemWriter(settings.output_root), settings=settings)
        report = processor.process(*providers)
        if args.json:
            print(json.dumps(report.as_dict(), ensure_ascii=False))
        else:
            counts = " ".join(f"{k}={v}" for k, v in sorted(report.status_counts().items())) or "no steps"
            print(f"{'OK' if report.ok else 'PARTIAL'}: {counts} registry={report.registry_status}")
            for r in report.results:
                if r.error:
                    print(f"- {r.type_name}: {r.status} - {r.error}")
        return 2 if (args.strict and not report.ok) else 0

    if args.cmd == "list":
        decls = []
        for provider in providers:
            for t in provider.discover():
                decl = extract_step(provider, t)
                if decl is not None:
                    decls.append(decl)
        if args.json:
            print(json.dumps([d.model_dump() for d in decls], ensure_ascii=False))
        else:
            for d in decls:
                print(f"{d.name} = {d.type_name}")
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
