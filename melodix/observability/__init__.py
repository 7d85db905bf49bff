# noqa: D104 - package initialization
from .logging import configure_structured_logging  # noqa: F401
from .metrics import metrics_blueprint, record_concert_lookup, record_enrichment, record_recognition  # noqa: F401
from .tracing import annotate, annotate_current, init_tracing, provider_span  # noqa: F401
