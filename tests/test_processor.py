from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import _sample_steps as samples
import pytest

from jenkinsfn.apt.processor import (
    REGISTRY_SKIPPED_EMPTY,
    REGISTRY_WRITE_ERROR,
    REGISTRY_WRITTEN,
    STEP_FAILED,
    STEP_WRITE_ERROR,
    STEP_WRITTEN,
    StepProcessor,
)
from jenkinsfn.apt.providers.runtime import RuntimeProvider
from jenkinsfn.apt.providers.source import SourceProvider
from jenkinsfn.apt.writer import FilesystemWriter, MemoryWriter
from jenkinsfn.core.annotations import argument, step
from jenkinsfn.core.exception import ResourceWriteError
from jenkinsfn.core.properties import load_properties
from jenkinsfn.core.runtime.settings import Settings

NS = "io.jenkins.functions"


class FailingWriter(MemoryWriter):
    def __init__(self, fail: set[str]):
        super().__init__()
        self.fail = fail

    def write_file(self, namespace: str, filename: str, text: str) -> str:
        if filename in self.fail:
            raise ResourceWriteError(namespace=namespace, filename=filename, reason="disk full")
        return super().write_file(namespace, filename, text)


def test_pass_writes_descriptors_and_registry(settings):
    writer = MemoryWriter()
    report = StepProcessor(writer, settings=settings).process(RuntimeProvider(modules=[samples]))

    assert report.ok
    assert report.status_counts() == {STEP_WRITTEN: 4}
    assert report.registry_status == REGISTRY_WRITTEN
    assert report.registry == {
        "leafStep": "_sample_steps.LeafStep",
        "greet": "_sample_steps.GreetStep",
        "helloStep": "_sample_steps.HelloStep",
        "URLStep": "_sample_steps.URLStep",
    }
    assert set(writer.files) == {
        (NS, "leafStep.step"),
        (NS, "greet.step"),
        (NS, "helloStep.step"),
        (NS, "URLStep.step"),
        (NS, "steps.properties"),
    }
    registry_text = writer.read(NS, "steps.properties")
    assert registry_text.startswith("#Generated by jenkinsfn-apt\n")
    assert load_properties(registry_text) == report.registry


def test_greet_end_to_end_on_disk(tmp_path: Path):
    src = tmp_path / "src"
    (src / "acme").mkdir(parents=True)
    (src / "acme" / "greet.py").write_text(
        "from jenkinsfn.core.api import argument, step\n"
        "\n"
        "@step(name='greet')\n"
        "class GreetStep:\n"
        "    name: str = 'ignored'\n"
        "    target: str = argument(name='who', description='target to greet')\n",
        encoding="utf-8",
    )
    out = tmp_path / "out"
    s = Settings(output_root=str(out), registry_timestamp=False)
    report = StepProcessor(FilesystemWriter(out), settings=s).process(SourceProvider([str(src)]))

    base = out / "io" / "jenkins" / "functions"
    assert report.ok
    assert (base / "steps.properties").read_text(encoding="utf-8") == (
        "#Generated by jenkinsfn-apt\n" "greet=acme.greet.GreetStep\n"
    )
    descriptor = (base / "greet.step").read_text(encoding="utf-8")
    assert descriptor.count("arg {") == 1
    assert "name 'who'" in descriptor
    assert "description 'target to greet'" in descriptor
    assert "className 'builtins.str'" in descriptor
    assert "name 'name'" not in descriptor


def test_registry_timestamp_line(settings):
    writer = MemoryWriter()
    s = settings.model_copy(update={"registry_timestamp": True})
    ts = datetime(2026, 10, 17, 9, 30, 0, tzinfo=timezone.utc)
    StepProcessor(writer, settings=s, timestamp=ts).process(RuntimeProvider(classes=[samples.GreetStep]))
    lines = writer.read(NS, "steps.properties").splitlines()
    assert lines == ["#Generated by jenkinsfn-apt", "#Sat Oct 17 09:30:00 UTC 2026", "greet=_sample_steps.GreetStep"]


def test_duplicate_names_last_write_wins(settings):
    @step(name="dup")
    class First:
        a: str = argument()

    @step(name="dup")
    class Second:
        b: str = argument()

    writer = MemoryWriter()
    report = StepProcessor(writer, settings=settings).process(RuntimeProvider(classes=[First, Second]))

    assert report.status_counts() == {STEP_WRITTEN: 2}
    assert report.registry == {"dup": Second.__module__ + "." + Second.__qualname__}
    text = writer.read(NS, "dup.step")
    assert "name 'b'" in text
    assert "name 'a'" not in text


def test_empty_pass_skips_registry(settings):
    writer = MemoryWriter()
    report = StepProcessor(writer, settings=settings).process(RuntimeProvider(classes=[samples.NotAStep]))
    assert report.results == []
    assert report.registry_status == REGISTRY_SKIPPED_EMPTY
    assert writer.files == {}
    assert report.ok


def test_write_failure_is_recorded_and_pass_continues(settings, caplog: pytest.LogCaptureFixture):
    writer = FailingWriter({"greet.step"})
    caplog.set_level(logging.INFO)
    report = StepProcessor(writer, settings=settings).process(RuntimeProvider(modules=[samples]))

    by_step = {r.step_name: r for r in report.results}
    assert by_step["greet"].status == STEP_WRITE_ERROR
    assert "disk full" in by_step["greet"].error
    assert by_step["helloStep"].status == STEP_WRITTEN
    assert not report.ok
    # The registry still lists the step whose descriptor failed.
    assert report.registry_status == REGISTRY_WRITTEN
    assert "greet" in report.registry
    assert any("step_write_error" in r.getMessage() for r in caplog.records)


def test_registry_write_failure(settings):
    writer = FailingWriter({"steps.properties"})
    report = StepProcessor(writer, settings=settings).process(RuntimeProvider(classes=[samples.GreetStep]))
    assert report.registry_status == REGISTRY_WRITE_ERROR
    assert "disk full" in report.registry_error
    assert (NS, "greet.step") in writer.files


def test_broken_declaration_does_not_stop_the_batch(settings):
    class ExplodingProvider(RuntimeProvider):
        def declared_fields(self, t):
            if t is samples.GreetStep:
                raise RuntimeError("boom")
            return super().declared_fields(t)

    writer = MemoryWriter()
    report = StepProcessor(writer, settings=settings).process(
        ExplodingProvider(classes=[samples.GreetStep, samples.HelloStep])
    )
    assert [r.status for r in report.results] == [STEP_FAILED, STEP_WRITTEN]
    assert report.results[0].error == "boom"
    assert report.registry == {"helloStep": "_sample_steps.HelloStep"}


def test_failing_discovery_is_recorded_and_other_providers_run(settings, caplog: pytest.LogCaptureFixture):
    class BrokenDiscovery(RuntimeProvider):
        def discover(self):
            raise RuntimeError("scan exploded")

    writer = MemoryWriter()
    report = StepProcessor(writer, settings=settings).process(
        BrokenDiscovery(), RuntimeProvider(classes=[samples.GreetStep])
    )
    assert not report.ok
    assert [(r.type_name, r.status, r.error) for r in report.results[:1]] == [
        ("BrokenDiscovery", STEP_FAILED, "scan exploded")
    ]
    assert report.results[1].status == STEP_WRITTEN
    assert report.registry == {"greet": "_sample_steps.GreetStep"}
    assert "Discovery failed in BrokenDiscovery" in caplog.text


def test_failing_describe_is_recorded_per_declaration(settings):
    class BrokenDescribe(RuntimeProvider):
        def describe(self, t):
            if t is samples.GreetStep:
                raise RuntimeError("no label")
            return super().describe(t)

    report = StepProcessor(MemoryWriter(), settings=settings).process(
        BrokenDescribe(classes=[samples.GreetStep, samples.HelloStep])
    )
    assert [r.status for r in report.results] == [STEP_FAILED, STEP_WRITTEN]
    assert report.results[0].error == "no label"
    assert report.results[0].type_name == repr(samples.GreetStep)
    assert report.registry == {"helloStep": "_sample_steps.HelloStep"}


def test_providers_share_one_registry(tmp_path: Path, settings):
    src = tmp_path / "src"
    src.mkdir()
    (src / "static_steps.py").write_text(
        "from jenkinsfn.core.api import step\n\n@step(name='fromSource')\nclass S:\n    pass\n",
        encoding="utf-8",
    )
    writer = MemoryWriter()
    report = StepProcessor(writer, settings=settings).process(
        SourceProvider([str(src)]), RuntimeProvider(classes=[samples.GreetStep])
    )
    assert report.registry == {"fromSource": "static_steps.S", "greet": "_sample_steps.GreetStep"}


def test_json_pass_summary_is_logged(settings, caplog: pytest.LogCaptureFixture):
    s = settings.model_copy(update={"log_format": "json"})
    caplog.set_level(logging.INFO)
    StepProcessor(MemoryWriter(), settings=s).process(RuntimeProvider(classes=[samples.GreetStep]))

    summaries = []
    for rec in caplog.records:
        try:
            data = json.loads(rec.getMessage())
        except ValueError:
            continue
        if data.get("event") == "pass_summary":
            summaries.append(data)
    assert summaries
    assert summaries[-1]["status_counts"] == {STEP_WRITTEN: 1}
    assert summaries[-1]["registry_status"] == REGISTRY_WRITTEN
