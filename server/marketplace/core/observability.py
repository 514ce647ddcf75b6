"""Observability setup for OpenTelemetry, Prometheus metrics, and structured logging."""

import logging

import structlog
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from .config import settings

SERVICE_NAME = "tour-marketplace-api"

# Prometheus metrics
REGISTRY = CollectorRegistry()

REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=REGISTRY
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=REGISTRY
)

# Business metrics
REVIEWS_SUBMITTED = Counter(
    'marketplace_reviews_submitted_total',
    'Reviews accepted for a tour',
    registry=REGISTRY
)

REVIEWS_DELETED = Counter(
    'marketplace_reviews_deleted_total',
    'Reviews removed from a tour',
    registry=REGISTRY
)

RATING_RECOMPUTATIONS = Counter(
    'marketplace_rating_recomputations_total',
    'Tour aggregate rating recomputations',
    ['trigger'],
    registry=REGISTRY
)

TOUR_WRITE_RETRIES = Counter(
    'marketplace_tour_write_retries_total',
    'Tour writes retried after an optimistic version conflict',
    ['operation'],
    registry=REGISTRY
)

AVAILABILITY_RECORDS_CREATED = Counter(
    'marketplace_availability_records_created_total',
    'Availability records created (one per date)',
    registry=REGISTRY
)

AVAILABILITY_BATCHES_REJECTED = Counter(
    'marketplace_availability_batches_rejected_total',
    'Availability batches rejected for out-of-window or blackout dates',
    registry=REGISTRY
)

TOURS_FLAGGED_FOR_REAPPROVAL = Counter(
    'marketplace_tours_flagged_for_reapproval_total',
    'Accepted tours flagged for re-approval after an availability change',
    ['trigger'],
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _resource() -> Resource:
    return Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": "1.0.0",
        "environment": settings.environment,
    })


def setup_tracing():
    """Setup OpenTelemetry tracing."""
    provider = TracerProvider(resource=_resource())
    trace.set_tracer_provider(provider)

    if settings.otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint))
        )

    return trace.get_tracer(__name__)


def setup_metrics():
    """Setup OpenTelemetry metrics."""
    if settings.otlp_endpoint:
        reader = PeriodicExportingMetricReader(
            exporter=OTLPMetricExporter(endpoint=settings.otlp_endpoint),
            export_interval_millis=60000,
        )
        metrics.set_meter_provider(MeterProvider(resource=_resource(), metric_readers=[reader]))

    return metrics.get_meter(__name__)


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine):
    """Instrument the async engine's sync core with OpenTelemetry."""
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


class MetricsCollector:
    """Collector for marketplace business metrics."""

    @staticmethod
    def record_request(method: str, endpoint: str, status_code: int, duration_seconds: float):
        """Record one served HTTP request."""
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration_seconds)

    @staticmethod
    def record_review_submitted():
        REVIEWS_SUBMITTED.inc()

    @staticmethod
    def record_review_deleted():
        REVIEWS_DELETED.inc()

    @staticmethod
    def record_rating_recomputed(trigger: str):
        """Record an aggregate rating recomputation (created/updated/deleted)."""
        RATING_RECOMPUTATIONS.labels(trigger=trigger).inc()

    @staticmethod
    def record_tour_write_retry(operation: str):
        TOUR_WRITE_RETRIES.labels(operation=operation).inc()

    @staticmethod
    def record_availability_created(count: int):
        AVAILABILITY_RECORDS_CREATED.inc(count)

    @staticmethod
    def record_availability_rejected():
        AVAILABILITY_BATCHES_REJECTED.inc()

    @staticmethod
    def record_tour_flagged(trigger: str):
        TOURS_FLAGGED_FOR_REAPPROVAL.labels(trigger=trigger).inc()


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()
