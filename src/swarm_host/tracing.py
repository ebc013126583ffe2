"""
OpenTelemetry tracing setup.

Spans are emitted by the dispatcher through the OpenTelemetry API; this
module installs an SDK provider when tracing is enabled in configuration.
"""

import logging
import sys
from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from .config import TracingConfig

logger = logging.getLogger(__name__)


def setup_tracing(config: TracingConfig) -> Optional[TracerProvider]:
    """
    Install a tracer provider for the service.

    Finished spans are exported to stderr; stdout carries the protocol stream.

    Returns:
        The installed provider, or None when tracing is disabled
    """
    if not config.enabled:
        logger.debug("Tracing disabled")
        return None

    resource = Resource.create({"service.name": config.service_name})
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    trace.set_tracer_provider(provider)

    logger.info(f"OpenTelemetry tracing initialized for {config.service_name}")
    return provider
