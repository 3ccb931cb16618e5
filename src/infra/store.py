"""
SQLAlchemy-backed persistence for the assistant.

Every method is scoped by user_id and opens its own transactional session,
returning detached records so callers never hold a live session.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import func, select

from src.infra.database import Database, get_database
from src.models.domain import (
    ActivityLog,
    InstructionPriority,
    Message,
    Notification,
    OngoingInstruction,
    Task,
    TaskStatus,
)
from src.services.protocols import InstructionRecord, MessageRecord, TaskRecord

OPEN_TASK_STATUSES = (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)


def _instruction_record(row: OngoingInstruction) -> InstructionRecord:
    return InstructionRecord(
        id=row.id,
        user_id=row.user_id,
        instruction=row.instruction,
        is_active=row.is_active,
        priority=row.priority.value,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _task_record(row: Task) -> TaskRecord:
    return TaskRecord(
        id=row.id,
        user_id=row.user_id,
        description=row.description,
        status=row.status.value,
        context=row.context or {},
        result=row.result,
        created_at=row.created_at,
    )


class SqlAgentStore:
    """Persistence collaborator backed by the application database"""

    def __init__(self, database: Optional[Database] = None):
        self.db = database or get_database()

    # ------------------------------------------------------------------
    # Ongoing instructions
    # ------------------------------------------------------------------

    def create_instruction(
        self, user_id: str, instruction: str, priority: str = "normal", is_active: bool = True
    ) -> InstructionRecord:
        with self.db.session_scope() as session:
            row = OngoingInstruction(
                user_id=user_id,
                instruction=instruction,
                priority=InstructionPriority(priority),
                is_active=is_active,
            )
            session.add(row)
            session.flush()
            logger.info(f"📋 Stored instruction {row.id} for user {user_id}")
            return _instruction_record(row)

    def list_instructions(self, user_id: str) -> List[InstructionRecord]:
        with self.db.session_scope() as session:
            rows = session.scalars(
                select(OngoingInstruction)
                .where(OngoingInstruction.user_id == user_id)
                .order_by(OngoingInstruction.created_at.desc(), OngoingInstruction.id.desc())
            ).all()
            return [_instruction_record(r) for r in rows]

    def get_active_instructions(self, user_id: str) -> List[InstructionRecord]:
        """Active instructions, newest first"""
        with self.db.session_scope() as session:
            rows = session.scalars(
                select(OngoingInstruction)
                .where(OngoingInstruction.user_id == user_id, OngoingInstruction.is_active.is_(True))
                .order_by(OngoingInstruction.created_at.desc(), OngoingInstruction.id.desc())
            ).all()
            return [_instruction_record(r) for r in rows]

    def update_instruction(self, user_id: str, instruction_id: int, **changes: Any) -> Optional[InstructionRecord]:
        """
        Update text, is_active or priority of one instruction.

        Returns:
            Updated record, or None when the instruction does not belong to the user
        """
        with self.db.session_scope() as session:
            row = session.get(OngoingInstruction, instruction_id)
            if row is None or row.user_id != user_id:
                return None

            if changes.get("instruction") is not None:
                row.instruction = changes["instruction"]
            if changes.get("is_active") is not None:
                row.is_active = bool(changes["is_active"])
            if changes.get("priority") is not None:
                row.priority = InstructionPriority(changes["priority"])
            row.updated_at = datetime.utcnow()
            session.flush()
            return _instruction_record(row)

    def delete_instruction(self, user_id: str, instruction_id: int) -> bool:
        with self.db.session_scope() as session:
            row = session.get(OngoingInstruction, instruction_id)
            if row is None or row.user_id != user_id:
                return False
            session.delete(row)
            return True

    def instruction_stats(self, user_id: str, instruction: str) -> Dict[str, Any]:
        """Execution count and last execution time from the activity log"""
        with self.db.session_scope() as session:
            rows = session.scalars(
                select(ActivityLog)
                .where(ActivityLog.user_id == user_id, ActivityLog.action == "proactive_action_executed")
                .order_by(ActivityLog.created_at.desc())
            ).all()
            executions = [r for r in rows if (r.details or {}).get("instruction") == instruction]
            return {
                "execution_count": len(executions),
                "last_executed": executions[0].created_at if executions else None,
            }

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def create_task(self, user_id: str, description: str, context: Optional[Dict[str, Any]] = None) -> TaskRecord:
        with self.db.session_scope() as session:
            row = Task(
                user_id=user_id,
                description=description,
                status=TaskStatus.PENDING,
                context=context or {},
            )
            session.add(row)
            session.flush()
            return _task_record(row)

    def update_task_status(self, user_id: str, task_id: int, status: str, result: Optional[str] = None) -> None:
        with self.db.session_scope() as session:
            row = session.get(Task, task_id)
            if row is None or row.user_id != user_id:
                logger.warning(f"⚠️  Task {task_id} not found for user {user_id}")
                return
            row.status = TaskStatus(status)
            if result is not None:
                row.result = result
            row.updated_at = datetime.utcnow()

    def get_task(self, user_id: str, task_id: int) -> Optional[TaskRecord]:
        with self.db.session_scope() as session:
            row = session.get(Task, task_id)
            if row is None or row.user_id != user_id:
                return None
            return _task_record(row)

    def get_pending_tasks(self, user_id: str, limit: int = 10) -> List[TaskRecord]:
        """Open (pending or in-progress) tasks, newest first"""
        with self.db.session_scope() as session:
            rows = session.scalars(
                select(Task)
                .where(Task.user_id == user_id, Task.status.in_(OPEN_TASK_STATUSES))
                .order_by(Task.created_at.desc(), Task.id.desc())
                .limit(limit)
            ).all()
            return [_task_record(r) for r in rows]

    def count_recent_pending_tasks(self, user_id: str, since: datetime) -> int:
        with self.db.session_scope() as session:
            return session.scalar(
                select(func.count(Task.id)).where(
                    Task.user_id == user_id,
                    Task.status.in_(OPEN_TASK_STATUSES),
                    Task.created_at >= since,
                )
            ) or 0

    # ------------------------------------------------------------------
    # Notifications and activity
    # ------------------------------------------------------------------

    def create_notification(
        self,
        user_id: str,
        type: str,
        service: str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        with self.db.session_scope() as session:
            session.add(Notification(
                user_id=user_id,
                type=type,
                service=service,
                title=title,
                message=message,
                data=data or {},
            ))

    def list_notifications(self, user_id: str, unread_only: bool = False) -> List[Dict[str, Any]]:
        with self.db.session_scope() as session:
            query = select(Notification).where(Notification.user_id == user_id)
            if unread_only:
                query = query.where(Notification.is_read.is_(False))
            rows = session.scalars(query.order_by(Notification.created_at.desc())).all()
            return [
                {
                    "id": r.id,
                    "type": r.type,
                    "service": r.service,
                    "title": r.title,
                    "message": r.message,
                    "data": r.data or {},
                    "isRead": r.is_read,
                    "createdAt": r.created_at,
                }
                for r in rows
            ]

    def log_activity(self, user_id: str, action: str, service: str, details: Optional[Dict[str, Any]] = None) -> None:
        with self.db.session_scope() as session:
            session.add(ActivityLog(user_id=user_id, action=action, service=service, details=details or {}))

    def list_activity(self, user_id: str, action: Optional[str] = None) -> List[Dict[str, Any]]:
        with self.db.session_scope() as session:
            query = select(ActivityLog).where(ActivityLog.user_id == user_id)
            if action:
                query = query.where(ActivityLog.action == action)
            rows = session.scalars(query.order_by(ActivityLog.created_at.desc())).all()
            return [
                {"action": r.action, "service": r.service, "details": r.details or {}, "createdAt": r.created_at}
                for r in rows
            ]

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def save_message(self, user_id: str, role: str, content: str) -> None:
        with self.db.session_scope() as session:
            session.add(Message(user_id=user_id, role=role, content=content))

    def get_recent_messages(self, user_id: str, limit: int = 10) -> List[MessageRecord]:
        """Most recent messages, newest first"""
        with self.db.session_scope() as session:
            rows = session.scalars(
                select(Message)
                .where(Message.user_id == user_id)
                .order_by(Message.created_at.desc(), Message.id.desc())
                .limit(limit)
            ).all()
            return [MessageRecord(role=r.role, content=r.content, created_at=r.created_at) for r in rows]
