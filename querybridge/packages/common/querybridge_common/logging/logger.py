"""
Root logger setup with OpenTelemetry exporters for logs and traces.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from opentelemetry import _logs, trace
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import (
    OTLPLogExporter as GrpcOTLPLogExporter,
)
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
    OTLPSpanExporter as GrpcOTLPSpanExporter,
)
from opentelemetry.exporter.otlp.proto.http._log_exporter import (
    OTLPLogExporter as HttpOTLPLogExporter,
)
from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
    OTLPSpanExporter as HttpOTLPSpanExporter,
)
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

DEFAULT_LOG_DIR = "./"
DEFAULT_LOG_FILE = "querybridge.log"
DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "querybridge")

_initialized = False


def get_root_logger() -> logging.Logger:
    """Return the process-wide root logger."""
    return logging.getLogger("")


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(threadName)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _otel_disabled() -> bool:
    return os.getenv("OTEL_SDK_DISABLED", "").strip().lower() in {"1", "true", "yes", "on"}


def _exporter_enabled(env_key: str) -> bool:
    return os.getenv(env_key, "otlp").strip().lower() not in {"none", "disabled"}


def _use_http(env_key: str) -> bool:
    protocol = os.getenv(env_key) or os.getenv("OTEL_EXPORTER_OTLP_PROTOCOL", "grpc")
    return protocol.strip().lower() in {"http/protobuf", "http"}


def _attach_otel(root: logging.Logger, service_name: str, level: str | int) -> None:
    resource = Resource.create({"service.name": service_name})

    tracer_provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(tracer_provider)
    if _exporter_enabled("OTEL_TRACES_EXPORTER"):
        if _use_http("OTEL_EXPORTER_OTLP_TRACES_PROTOCOL"):
            span_exporter = HttpOTLPSpanExporter()
        else:
            span_exporter = GrpcOTLPSpanExporter()
        tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))

    logger_provider = LoggerProvider(resource=resource)
    _logs.set_logger_provider(logger_provider)
    if _exporter_enabled("OTEL_LOGS_EXPORTER"):
        if _use_http("OTEL_EXPORTER_OTLP_LOGS_PROTOCOL"):
            log_exporter = HttpOTLPLogExporter()
        else:
            log_exporter = GrpcOTLPLogExporter()
        logger_provider.add_log_record_processor(BatchLogRecordProcessor(log_exporter))
        root.addHandler(LoggingHandler(level=level, logger_provider=logger_provider))


def setup_logging(
    *,
    service_name: Optional[str] = None,
    level: str | int = DEFAULT_LOG_LEVEL,
    log_dir: str = DEFAULT_LOG_DIR,
    log_file: str = DEFAULT_LOG_FILE,
    with_console: bool = True,
) -> logging.Logger:
    """
    Configure the root logger. Handlers are only attached on the first call;
    later calls just update the level.
    """
    global _initialized

    root = get_root_logger()
    root.setLevel(level)
    if _initialized:
        return root
    _initialized = True

    formatter = _build_formatter()
    if with_console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)

    if _otel_disabled():
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, log_file),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        return root

    _attach_otel(root, service_name or DEFAULT_SERVICE_NAME, level)
    return root
