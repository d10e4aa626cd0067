"""OpenTelemetry metrics for the notary trust store."""

from opentelemetry import metrics

# Get meter for notary module
meter = metrics.get_meter("notary")

# Trust store counters
certificates_trusted_total = meter.create_counter(
    name="notary_certificates_trusted_total",
    description="Total certificates added to the trust store",
    unit="1",
)

certificates_removed_total = meter.create_counter(
    name="notary_certificates_removed_total",
    description="Total certificates removed from the trust store",
    unit="1",
)

trust_store_load_skipped_total = meter.create_counter(
    name="notary_trust_store_load_skipped_total",
    description="Files skipped while loading the trust store",
    unit="1",
)

# Resolution counters
certificates_resolved_total = meter.create_counter(
    name="notary_certificates_resolved_total",
    description="Certificate resolutions by source kind and result",
    unit="1",
)

# Generation
keypairs_generated_total = meter.create_counter(
    name="notary_keypairs_generated_total",
    description="Total signing key pairs generated",
    unit="1",
)

keypair_generation_duration = meter.create_histogram(
    name="notary_keypair_generation_duration_seconds",
    description="Key pair and certificate generation duration in seconds",
    unit="s",
)


class NotaryMetrics:
    """Facade for notary metrics with proper labels."""

    def record_certificate_trusted(self, origin: str) -> None:
        """Record a certificate added. Labels: origin=resolved|generated"""
        certificates_trusted_total.add(1, {"origin": origin})

    def record_certificate_removed(self) -> None:
        certificates_removed_total.add(1)

    def record_load_skipped(self, reason: str) -> None:
        """Record a skipped store file. Labels: reason=unparsable|duplicate|unreadable"""
        trust_store_load_skipped_total.add(1, {"reason": reason})

    def record_certificate_resolved(self, source: str, result: str) -> None:
        """Record resolution. Labels: source=url|file, result=ok|error"""
        certificates_resolved_total.add(1, {"source": source, "result": result})

    def record_keypair_generated(self, algorithm: str, duration_seconds: float) -> None:
        keypairs_generated_total.add(1, {"algorithm": algorithm})
        keypair_generation_duration.record(duration_seconds)


# Singleton instance
notary_metrics = NotaryMetrics()
