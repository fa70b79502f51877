"""
System-log audit sink.

Every mutating ledger call records one row, success or failure. Recording
runs in its own session and never raises, so a broken audit table cannot
roll back or fail the business operation it describes.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.system_log import SystemLog
from db import SessionLocal

logger = logging.getLogger("ops-portal-api")


class AuditAction(str, Enum):
    OUT_MANAGE_INSERT = "OUT_MANAGE_INSERT"
    OUT_MANAGE_UPDATE = "OUT_MANAGE_UPDATE"
    OUT_MANAGE_DELETE = "OUT_MANAGE_DELETE"
    OUT_MANAGE_TIME_SAVE = "OUT_MANAGE_TIME_SAVE"
    OUT_MANAGE_TIME_DELETE = "OUT_MANAGE_TIME_DELETE"


@dataclass(frozen=True)
class AuditEvent:
    staff_id: str | None
    action: AuditAction
    request_url: str
    ip_address: str
    success: bool
    error_message: str | None = None


class AuditSink(Protocol):
    def record(self, event: AuditEvent) -> None: ...


class SystemLogSink:
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    def record(self, event: AuditEvent) -> None:
        try:
            with self._session_factory() as session:
                session.add(
                    SystemLog(
                        staff_id=event.staff_id,
                        action_type=event.action.value,
                        request_url=event.request_url,
                        ip_address=event.ip_address,
                        success=event.success,
                        error_message=event.error_message,
                    )
                )
                session.commit()
        except SQLAlchemyError:
            logger.warning("Failed to record audit event %s", event.action.value, exc_info=True)


def get_audit_sink() -> AuditSink:
    return SystemLogSink()


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def record_action(
    sink: AuditSink,
    request: Request,
    staff_id: str | None,
    action: AuditAction,
    success: bool = True,
    error_message: str | None = None,
) -> None:
    event = AuditEvent(
        staff_id=staff_id,
        action=action,
        request_url=request.url.path,
        ip_address=client_ip(request),
        success=success,
        error_message=error_message,
    )
    try:
        sink.record(event)
    except Exception:
        logger.warning("Audit sink raised for %s", action.value, exc_info=True)
