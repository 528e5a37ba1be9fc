"""
표준 logging + OpenTelemetry 기반 Observability
"""

from .logging_manager import (
    initialize_logging,
    shutdown_logging,
    get_tracer,
    get_meter,
    traced,
    trace_class,
    is_initialized
)

__all__ = [
    'initialize_logging',
    'shutdown_logging',
    'get_tracer',
    'get_meter',
    'traced',
    'trace_class',
    'is_initialized',
]
