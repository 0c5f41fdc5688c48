# -*- coding: utf-8 -*-
"""
tokenbound.telemetry.logging — настройка структурного логирования.

Возможности:
- JSON‑логи (однострочно), UTC‑время в RFC3339.
- Контекст операции через contextvars: account, caller, tx_hash, operation.
- Текстовый формат для локальной отладки и тестов.
- Безопасные дефолты уровней для шумных библиотек.

Зависимости: только стандартная библиотека Python.
"""

from __future__ import annotations

import contextvars
import json
import logging
import os
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

# ============================ Контекст операции ============================

cv_account: contextvars.ContextVar[str] = contextvars.ContextVar("account", default="-")
cv_caller: contextvars.ContextVar[str] = contextvars.ContextVar("caller", default="-")
cv_tx_hash: contextvars.ContextVar[str] = contextvars.ContextVar("tx_hash", default="-")
cv_operation: contextvars.ContextVar[str] = contextvars.ContextVar("operation", default="-")
cv_env: contextvars.ContextVar[str] = contextvars.ContextVar("env", default=os.getenv("APP_ENV", "dev"))
cv_service: contextvars.ContextVar[str] = contextvars.ContextVar("service", default="tokenbound-core")
cv_version: contextvars.ContextVar[str] = contextvars.ContextVar("version", default=os.getenv("APP_VERSION", "0.1.0"))

_OPERATION_VARS = (cv_account, cv_caller, cv_tx_hash, cv_operation)

def _hex(v: Optional[int]) -> Optional[str]:
    return hex(v) if isinstance(v, int) else None

def bind_context(
    *,
    account: Optional[int] = None,
    caller: Optional[int] = None,
    tx_hash: Optional[int] = None,
    operation: Optional[str] = None,
    env: Optional[str] = None,
    service: Optional[str] = None,
    version: Optional[str] = None,
) -> None:
    if account is not None: cv_account.set(_hex(account))
    if caller is not None: cv_caller.set(_hex(caller))
    if tx_hash is not None: cv_tx_hash.set(_hex(tx_hash))
    if operation: cv_operation.set(operation)
    if env: cv_env.set(env)
    if service: cv_service.set(service)
    if version: cv_version.set(version)

def clear_context() -> None:
    for cv in _OPERATION_VARS:
        cv.set("-")

@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Временная привязка контекста; восстанавливает прежние значения на выходе."""
    tokens = [(cv, cv.set(cv.get())) for cv in _OPERATION_VARS]
    bind_context(**kwargs)
    try:
        yield
    finally:
        for cv, token in reversed(tokens):
            cv.reset(token)

# ============================ JSON Formatter ============================

_RESERVED = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs",
    "relativeCreated", "thread", "threadName", "processName", "process", "asctime",
    "taskName", "message",
))

class JsonFormatter(logging.Formatter):
    def __init__(self, *, static_fields: Optional[Dict[str, Any]] = None):
        super().__init__()
        self.static_fields = static_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        base: Dict[str, Any] = {
            "ts": ts,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "env": cv_env.get(),
            "service": cv_service.get(),
            "version": cv_version.get(),
            "account": cv_account.get(),
            "caller": cv_caller.get(),
            "tx_hash": cv_tx_hash.get(),
            "operation": cv_operation.get(),
        }
        if record.exc_info:
            base["exc_type"] = record.exc_info[0].__name__ if record.exc_info[0] else None
            base["exc"] = self.formatException(record.exc_info)
        extras = {k: v for k, v in record.__dict__.items() if k not in _RESERVED}
        base.update(self.static_fields)
        if extras:
            base["extra"] = extras
        return json.dumps(base, ensure_ascii=False, separators=(",", ":"), default=str)

class ContextTextFormatter(logging.Formatter):
    """Текстовый формат: [ts] LEVEL logger op=... account=...: msg"""
    def __init__(self) -> None:
        super().__init__("[%(asctime)s] %(levelname)s %(name)s op=%(operation)s account=%(account)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        record.operation = cv_operation.get()
        record.account = cv_account.get()
        return super().format(record)

# ============================ Публичное API ============================

def setup_logging(
    *,
    level: str = os.getenv("LOG_LEVEL", "INFO"),
    json_format: bool = True,
    service: Optional[str] = None,
    env: Optional[str] = None,
    version: Optional[str] = None,
    static_fields: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Инициализация глобального логирования. Вызывайте один раз при старте.

    level: глобальный уровень (строка, как в stdlib)
    json_format: JSON (прод) или текст (локально/тесты)
    static_fields: статические поля, добавляемые в каждый лог
    """
    root = logging.getLogger()
    root.setLevel(_to_level(level))
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(stream=sys.stderr)
    if json_format:
        handler.setFormatter(JsonFormatter(static_fields=static_fields))
    else:
        handler.setFormatter(ContextTextFormatter())
    root.addHandler(handler)

    bind_context(env=env, service=service, version=version)

def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or "tokenbound")

def _to_level(v: str | int) -> int:
    if isinstance(v, int):
        return v
    level = logging.getLevelName(str(v).upper())
    return level if isinstance(level, int) else logging.INFO
