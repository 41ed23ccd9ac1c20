import json
import timeit
from pathlib import Path
from typing import Any, Final

from sizetarget.controller import SizeTargetController
from sizetarget.models import EncodeFormat, PixelBuffer, TargetSpec
from sizetarget.search import QualitySearch
from tests.stubs import StubEncoder, StubResizer, constant_size

from .perf_baselines import PERF_BASELINES, PerfBaseline

RESULTS_FILENAME: Final[str] = "search_perf_metrics.json"


def _run_benchmark(stmt: str, namespace: dict[str, Any], baseline: PerfBaseline) -> float:
    duration = timeit.timeit(stmt, globals=namespace, number=baseline.loops)
    return duration / baseline.loops * 1e6


def _record_metric(directory: Path, name: str, value_us: float) -> None:
    metrics_path = directory / RESULTS_FILENAME
    metrics = {}
    if metrics_path.exists():
        metrics = json.loads(metrics_path.read_text(encoding="utf-8"))
    metrics[name] = value_us
    metrics_path.write_text(json.dumps(metrics, indent=2), encoding="utf-8")


def _assert_perf(name: str, stmt: str, namespace: dict[str, Any]) -> float:
    baseline = PERF_BASELINES[name]
    per_call_us = _run_benchmark(stmt, namespace, baseline)
    assert (
        per_call_us <= baseline.max_us_per_call
    ), f"{name} took {per_call_us:.3f}us per call, expected ≤ {baseline.max_us_per_call:.2f}us"
    return per_call_us


def test_quality_search_perf(tmp_path):
    namespace = {
        "search": QualitySearch(StubEncoder(size_fn=constant_size(2_048))),
        "pixels": PixelBuffer(width=1200, height=900),
        "fmt": EncodeFormat.JPEG,
    }
    per_call_us = _assert_perf("quality_search", "search.run(pixels, fmt, 20_480)", namespace)
    _record_metric(tmp_path, "quality_search", per_call_us)


def test_compress_exhausted_perf(tmp_path):
    controller = SizeTargetController(StubEncoder(size_fn=constant_size(4_096)), StubResizer())
    namespace = {
        "controller": controller,
        "source": PixelBuffer(width=4000, height=3000),
        "spec": TargetSpec(target_bytes=1_024, max_dimension=1200),
    }
    per_call_us = _assert_perf("compress_exhausted", "controller.compress(source, spec)", namespace)
    _record_metric(tmp_path, "compress_exhausted", per_call_us)
