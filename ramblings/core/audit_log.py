"""
Audit logging for admin sign-in and access events.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, asdict
import json
import logging


class AuditEventType(Enum):
    """Types of admin events to audit."""
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"

    UNAUTHORIZED_ACCESS = "unauthorized_access"


class AuditEventSeverity(Enum):
    """Severity levels for audit events."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class AuditEvent:
    """Represents an admin audit event."""
    event_type: AuditEventType
    severity: AuditEventSeverity
    timestamp: datetime
    username: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    success: bool = True
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for logging."""
        data = asdict(self)
        data["event_type"] = self.event_type.value
        data["severity"] = self.severity.value
        data["timestamp"] = self.timestamp.isoformat()
        return data

    def to_json(self) -> str:
        """Convert event to JSON string."""
        return json.dumps(self.to_dict())


class AuditLogger:
    """
    Audit logger for admin events.
    Events go to the ``<app_name>.audit`` logger as JSON lines and are
    kept in memory for inspection.
    """

    def __init__(self, app_name: str = "ramblings", max_events: int = 1000):
        self.app_name = app_name
        self.max_events = max_events
        self.logger = logging.getLogger(f"{app_name}.audit")
        self._events: List[AuditEvent] = []

    def log_event(self, event: AuditEvent) -> None:
        """
        Log an audit event.

        Args:
            event: The audit event to log
        """
        self._events.append(event)
        if len(self._events) > self.max_events:
            del self._events[: len(self._events) - self.max_events]

        log_level = {
            AuditEventSeverity.INFO: logging.INFO,
            AuditEventSeverity.WARNING: logging.WARNING,
            AuditEventSeverity.ERROR: logging.ERROR,
            AuditEventSeverity.CRITICAL: logging.CRITICAL,
        }.get(event.severity, logging.INFO)

        self.logger.log(log_level, event.to_json())

    def log_login_success(
        self,
        username: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> None:
        """Log successful admin login."""
        self.log_event(AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCESS,
            severity=AuditEventSeverity.INFO,
            timestamp=datetime.now(timezone.utc),
            username=username,
            ip_address=ip_address,
            user_agent=user_agent,
        ))

    def log_login_failed(
        self,
        username: str,
        reason: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> None:
        """Log failed login attempt."""
        self.log_event(AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditEventSeverity.WARNING,
            timestamp=datetime.now(timezone.utc),
            username=username,
            ip_address=ip_address,
            user_agent=user_agent,
            success=False,
            error_message=reason
        ))

    def log_logout(self, ip_address: Optional[str] = None) -> None:
        self.log_event(AuditEvent(
            event_type=AuditEventType.LOGOUT,
            severity=AuditEventSeverity.INFO,
            timestamp=datetime.now(timezone.utc),
            ip_address=ip_address,
        ))

    def log_unauthorized_access(
        self,
        resource: str,
        ip_address: Optional[str] = None,
    ) -> None:
        """Log an admin-only request made without a valid session."""
        self.log_event(AuditEvent(
            event_type=AuditEventType.UNAUTHORIZED_ACCESS,
            severity=AuditEventSeverity.WARNING,
            timestamp=datetime.now(timezone.utc),
            ip_address=ip_address,
            success=False,
            details={"resource": resource}
        ))

    def get_events(
        self,
        event_type: Optional[AuditEventType] = None,
        start_time: Optional[datetime] = None,
        limit: int = 100
    ) -> List[AuditEvent]:
        """
        Retrieve recent audit events, oldest first.

        Args:
            event_type: Filter by event type
            start_time: Filter events after this time
            limit: Maximum number of events to return
        """
        filtered_events = self._events

        if event_type is not None:
            filtered_events = [e for e in filtered_events if e.event_type == event_type]

        if start_time is not None:
            filtered_events = [e for e in filtered_events if e.timestamp >= start_time]

        return filtered_events[-limit:]

    def clear(self) -> None:
        self._events.clear()


# Global audit logger instance
_audit_logger: Optional[AuditLogger] = None


def get_audit_logger() -> AuditLogger:
    """Get or create the audit logger instance."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger
