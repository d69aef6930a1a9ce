import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from models.audit_log import AuditAction, AuditLog
from .base import Repository

logger = logging.getLogger(__name__)


class AuditLogRepository(Repository[AuditLog]):
    model = AuditLog

    def record(
        self,
        action: AuditAction,
        user_id: Optional[str] = None,
        project_id: Optional[str] = None,
        payload: Optional[dict[str, Any]] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[AuditLog]:
        """Append an audit row. Audit is advisory: a failed write is logged, never raised."""
        entry = AuditLog(
            action=action,
            user_id=user_id,
            project_id=project_id,
            payload=payload,
            ip=ip,
            user_agent=user_agent,
        )
        try:
            self.db.add(entry)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to write audit log {action.value}: {e}")
            return None
        return entry

    def list_for_project(self, project_id: str, action: Optional[AuditAction] = None):
        filters = {"project_id": project_id}
        if action is not None:
            filters["action"] = action
        return self.list(order_by=AuditLog.id, **filters)
