"""
LoggingManager - 표준 logging 포맷 + OpenTelemetry Provider 설정과 추적 데코레이터

- initialize_logging: 프로세스당 한 번 (create_app 에서 호출)
- shutdown_logging: 앱 종료 시 Span/Metric exporter flush
- traced / trace_class: 매니저, 저장소 메서드를 span 으로 감싼다
"""

import asyncio
import inspect
import logging
from functools import wraps
from typing import Callable, Optional

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Span, Status, StatusCode

from src.config.resources import LoggingConfig


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_tracer_provider: Optional[TracerProvider] = None
_meter_provider: Optional[MeterProvider] = None
_initialized = False
_config: Optional[LoggingConfig] = None

logger = logging.getLogger(__name__)


def _build_tracer_provider(config: LoggingConfig, resource: Resource) -> TracerProvider:
    provider = TracerProvider(resource=resource)
    if config.otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=config.otlp_endpoint)))
    if config.enable_console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    return provider


def _build_meter_provider(config: LoggingConfig, resource: Resource) -> MeterProvider:
    readers = []
    if config.otlp_endpoint:
        readers.append(PeriodicExportingMetricReader(OTLPMetricExporter(endpoint=config.otlp_endpoint)))
    return MeterProvider(resource=resource, metric_readers=readers)


def initialize_logging(config: LoggingConfig) -> bool:
    """
    표준 logging 포맷과 OpenTelemetry Provider 를 초기화합니다.
    두 번째 호출부터는 아무것도 하지 않습니다 (테스트에서 앱을 여러 번 생성).

    Returns:
        bool: OpenTelemetry 초기화 성공 여부
    """
    global _tracer_provider, _meter_provider, _initialized, _config

    if _initialized:
        return True

    logging.basicConfig(level=getattr(logging, config.log_level), format=LOG_FORMAT)
    _config = config

    try:
        resource = Resource.create({
            "service.name": config.service_name,
            "service.version": config.service_version,
            "deployment.environment": config.environment,
        })
        _tracer_provider = _build_tracer_provider(config, resource)
        _meter_provider = _build_meter_provider(config, resource)

        trace.set_tracer_provider(_tracer_provider)
        metrics.set_meter_provider(_meter_provider)

        _initialized = True
        logger.info(
            "[logging] 초기화 완료: service=%s, env=%s, otlp=%s",
            config.service_name,
            config.environment,
            bool(config.otlp_endpoint),
        )
        return True

    except Exception as e:
        _initialized = True  # 재시도 방지
        logger.warning(f"[logging] OpenTelemetry 초기화 실패, 로컬 로깅만 사용: {e}")
        return False


def shutdown_logging() -> None:
    """대기 중인 span/metric 을 exporter 로 내보낸다"""
    if _tracer_provider is not None:
        _tracer_provider.force_flush()
    if _meter_provider is not None:
        _meter_provider.force_flush()


def get_tracer(name: str) -> trace.Tracer:
    version = _config.service_version if _config else "1.0.0"
    return trace.get_tracer(name, version)


def get_meter(name: str) -> metrics.Meter:
    version = _config.service_version if _config else "1.0.0"
    return metrics.get_meter(name, version)


def is_initialized() -> bool:
    return _initialized


# === Tracing Decorators ===

def _mark_failed(span: Span, error: Exception) -> None:
    span.record_exception(error)
    span.set_status(Status(StatusCode.ERROR, str(error)))


def traced(operation_name: Optional[str] = None):
    """
    함수/메서드 호출을 span 으로 감싸는 데코레이터.
    span 이름은 기본적으로 `Class.method` (qualname), 예외는 기록 후 그대로 전파.
    """
    def decorator(func: Callable) -> Callable:
        tracer = get_tracer(func.__module__)
        span_name = operation_name or func.__qualname__

        if asyncio.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                with tracer.start_as_current_span(span_name) as span:
                    try:
                        result = await func(*args, **kwargs)
                    except Exception as e:
                        _mark_failed(span, e)
                        raise
                    span.set_status(Status(StatusCode.OK))
                    return result
            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            with tracer.start_as_current_span(span_name) as span:
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    _mark_failed(span, e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result
        return sync_wrapper

    return decorator


def trace_class(cls):
    """
    클래스에 직접 정의된 public 함수에 traced 를 적용하는 클래스 데코레이터
    (staticmethod/classmethod/property 및 상속 메서드는 제외)
    """
    for attr_name, attr in list(vars(cls).items()):
        if inspect.isfunction(attr) and not attr_name.startswith('_'):
            setattr(cls, attr_name, traced()(attr))
    return cls
