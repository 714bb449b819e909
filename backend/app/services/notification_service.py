"""Notification service for applicant confirmations"""

from typing import Optional

from backend.app.core.task_queue import TaskQueue, task_queue
from backend.app.core.logging import get_logger

logger = get_logger(__name__)

REGISTRATION_CONFIRMATION_TASK = "registration_confirmation"


class NotificationService:
    """Hands confirmation emails to the background worker"""

    def __init__(self, queue: Optional[TaskQueue] = None):
        self.task_queue = queue or task_queue

    async def send_registration_confirmation(self, email: str, full_name: str) -> Optional[str]:
        """
        Queue the confirmation email for a new registration

        Runs after the response has been sent, so failures are logged and
        never raised.

        Returns:
            Job ID of the queued task, or None if queueing failed
        """
        try:
            job_id = await self.task_queue.enqueue_task(
                task_type=REGISTRATION_CONFIRMATION_TASK,
                task_data={"email": email, "full_name": full_name}
            )
        except Exception:
            logger.exception(f"Failed to queue registration confirmation for {email}")
            return None

        logger.info(f"Queued registration confirmation for {email}", extra={"job_id": job_id})
        return job_id


notification_service = NotificationService()
