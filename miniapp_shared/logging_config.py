"""Centralized logging configuration with correlation ID support."""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator
from pythonjsonlogger import jsonlogger

correlation_id_var: ContextVar[str] = ContextVar('correlation_id', default='')


class CorrelationIdFilter(logging.Filter):
    """Adds correlation_id to all log records"""
    
    def filter(self, record):
        record.correlation_id = correlation_id_var.get('')
        return True


def setup_logging(service_name: str, level: int = logging.INFO) -> None:
    """Sets up JSON logging for flow runs; records carry the run's correlation id"""
    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers = []
    
    json_handler = logging.StreamHandler(sys.stdout)
    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(correlation_id)s %(message)s',
        rename_fields={
            'asctime': 'timestamp',
            'name': 'logger',
            'levelname': 'level',
        }
    )
    
    json_handler.setFormatter(formatter)
    json_handler.addFilter(CorrelationIdFilter())
    logger.addHandler(json_handler)
    logging.info(f"{service_name} logging configured", extra={"service": service_name})


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> str:
    return correlation_id_var.get('')


@contextmanager
def correlation_scope(default_id: str) -> Iterator[str]:
    """Binds default_id as the correlation id for the block unless one is already set.

    A caller-provided id (for example from an inbound request) wins, so the
    run's logs and outbound requests stay tied to the caller's trace.
    """
    current = correlation_id_var.get('')
    if current:
        yield current
        return
    
    token = correlation_id_var.set(default_id)
    try:
        yield default_id
    finally:
        correlation_id_var.reset(token)
