"""Benchmark: request build latency (p50/p95/mean).

Measures per-call latency of building a filtered delta-sync query for a
schema with nested custom types, and of compiling its predicate alone.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import modelsync
from modelsync.predicate import QueryField, and_, or_
from modelsync.schema import SchemaSerializer

_WARMUP: int = 100
_ITERATIONS: int = 3_000

_SCHEMA = SchemaSerializer().from_yaml("""
name: Parent
fields:
  - {name: id, type: ID, required: true}
  - {name: name, type: String, required: true}
  - {name: address, type: Address, kind: customType}
  - {name: children, type: Child, kind: customType, list: true}
customTypes:
  Phonenumber:
    - {name: code, type: Int, required: true}
    - {name: carrier, type: String, required: true}
    - {name: number, type: String, required: true}
  Address:
    - {name: street, type: String, required: true}
    - {name: city, type: String, required: true}
    - {name: phoneNumber, type: Phonenumber, kind: customType}
  Child:
    - {name: name, type: String, required: true}
    - {name: address, type: Address, kind: customType}
""")

_PREDICATE = and_(
    QueryField("name").begins_with("J"),
    or_(QueryField("id").eq("a"), QueryField("id").eq("b"), QueryField("id").eq("c")),
)


def _measure(operation: str, call) -> dict[str, object]:
    for _ in range(_WARMUP):
        call()

    latencies_ms: list[float] = []
    for _ in range(_ITERATIONS):
        t0 = time.perf_counter()
        call()
        latencies_ms.append((time.perf_counter() - t0) * 1000)

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000

    result: dict[str, object] = {
        "operation": operation,
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p50_ms": round(sorted_lats[int(n * 0.50)], 4),
        "p95_ms": round(sorted_lats[min(int(n * 0.95), n - 1)], 4),
    }
    print(
        f"[bench_latency] {result['operation']}: "
        f"p50={result['p50_ms']:.4f}ms  p95={result['p95_ms']:.4f}ms  "
        f"mean={result['avg_latency_ms']:.4f}ms"
    )
    return result


def bench_sync_request_latency() -> dict[str, object]:
    """Benchmark building a filtered delta-sync query with its document.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p50_ms, p95_ms.
    """
    def call() -> None:
        modelsync.build_sync_request(_SCHEMA, 123123123, 1000, _PREDICATE).content

    return _measure("sync_request_latency_nested_custom_types", call)


def bench_predicate_compile_latency() -> dict[str, object]:
    """Benchmark compiling the sync predicate on its own."""
    return _measure("predicate_compile_latency", lambda: modelsync.compile_predicate(_PREDICATE))


if __name__ == "__main__":
    results = [bench_sync_request_latency(), bench_predicate_compile_latency()]
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "latency_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(results, fh, indent=2)
    print(f"Results saved to {output_path}")
