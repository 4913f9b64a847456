"""
swift-wire - Prometheus Metrics

Counters and histograms for encode batches, network-wrapper fallbacks and
validated files. Every instance owns its registry so tests and concurrent
runs never share counters.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    write_to_textfile,
)

logger = logging.getLogger(__name__)


class WireMetrics:
    """Prometheus metrics for the encoders and the round-trip validator."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()
        self._setup_metrics()

    def _setup_metrics(self):
        """Initialize all Prometheus metrics."""

        # === Encoding Metrics ===
        self.messages_encoded_total = Counter(
            "swift_wire_messages_encoded_total",
            "Total number of messages passed through an encoder",
            ["format", "status"],
            registry=self.registry,
        )

        self.batch_bytes = Histogram(
            "swift_wire_batch_bytes",
            "Size of encoded batches in bytes",
            ["format"],
            buckets=[512, 4096, 32768, 262144, 1048576, 8388608, 67108864],
            registry=self.registry,
        )

        # === Network Wrapper Metrics ===
        self.wrap_fallbacks_total = Counter(
            "swift_wire_wrap_fallbacks_total",
            "Messages emitted unwrapped because network wrapping failed",
            ["format"],
            registry=self.registry,
        )

        # === Validation Metrics ===
        self.files_validated_total = Counter(
            "swift_wire_files_validated_total",
            "Total number of input files checked by the validator",
            ["status"],
            registry=self.registry,
        )

    def record_message(self, format_code: str, success: bool) -> None:
        status = "success" if success else "failure"
        self.messages_encoded_total.labels(format=format_code, status=status).inc()

    def record_batch(self, format_code: str, size_bytes: int) -> None:
        self.batch_bytes.labels(format=format_code).observe(size_bytes)

    def record_wrap_fallback(self, format_code: str) -> None:
        self.wrap_fallbacks_total.labels(format=format_code).inc()

    def record_file_validation(self, passed: bool) -> None:
        self.files_validated_total.labels(status="passed" if passed else "failed").inc()

    def export(self) -> bytes:
        """Render the registry in the Prometheus text exposition format."""
        return generate_latest(self.registry)

    def write_textfile(self, path: Union[str, Path]) -> None:
        """Write the registry to ``path`` for the node-exporter textfile collector."""
        write_to_textfile(str(path), self.registry)
        logger.info("Metrics written to %s", path)
