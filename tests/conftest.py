import tempfile
import shutil
from pathlib import Path

import sys

# Allow running tests without installing the package.
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

import pytest
from jenkinsfn.core.runtime.settings import Settings


@pytest.fixture()
def temp_dir():
    d = Path(tempfile.mkdtemp(prefix="jenkinsfn_test_"))
    try:
        yield d
    finally:
        shutil.rmtree(d, ignore_errors=True)


@pytest.fixture()
def settings(temp_dir):
    return Settings(
        output_root=str(temp_dir / "out"),
        namespace="io.jenkins.functions",
        registry_timestamp=False,
        log_level="INFO",
    )
