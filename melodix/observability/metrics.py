from __future__ import annotations

from flask import Blueprint, Response
from prometheus_client import Counter, Histogram, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

RECOGNITIONS = Counter(
    "melodix_recognitions_total",
    "Recognition requests by outcome (created, existing, or an error kind).",
    ["outcome"],
)
ENRICHMENT_LOOKUPS = Counter(
    "melodix_enrichment_lookups_total",
    "Catalog enrichment attempts by target and result.",
    ["target", "status"],
)
CONCERT_LOOKUPS = Counter(
    "melodix_concert_lookups_total",
    "Concert lookups by outcome (ok, empty, or an upstream failure kind).",
    ["outcome"],
)
PLAYLIST_IMPORTS = Counter(
    "melodix_playlist_imports_total",
    "Catalog playlists persisted by the cross-reference import.",
)
PROVIDER_LATENCY = Histogram(
    "melodix_provider_request_seconds",
    "Latency of outbound calls to third-party providers.",
    ["provider"],
    buckets=(0.1, 0.25, 0.5, 1, 2, 5, 10, 30, float("inf")),
)


def record_recognition(outcome: str) -> None:
    RECOGNITIONS.labels(outcome=outcome).inc()


def record_enrichment(target: str, status: str) -> None:
    ENRICHMENT_LOOKUPS.labels(target=target, status=status).inc()


def record_concert_lookup(outcome: str) -> None:
    CONCERT_LOOKUPS.labels(outcome=outcome).inc()


def record_playlist_imports(count: int) -> None:
    if count > 0:
        PLAYLIST_IMPORTS.inc(count)


def observe_provider_latency(provider: str, seconds: float) -> None:
    PROVIDER_LATENCY.labels(provider=provider).observe(max(0.0, seconds))


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
