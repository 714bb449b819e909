"""Task queue abstraction using Redis"""

import enum
import json
import uuid
from typing import Any, Dict, Optional
from datetime import datetime, timedelta, timezone
import redis.asyncio as redis
from redis.asyncio import Redis
import logging
from backend.app.core.config import settings

logger = logging.getLogger(__name__)


class TaskStatus(str, enum.Enum):
    """Lifecycle of a queued task"""
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskQueue:
    """Redis-based task queue for background job processing"""

    def __init__(self, redis_url: Optional[str] = None, queue_name: Optional[str] = None):
        """Initialize task queue with Redis connection settings"""
        self.redis_url = redis_url or settings.REDIS_URL
        self._redis: Optional[Redis] = None
        self.queue_name = queue_name or settings.NOTIFICATION_QUEUE_NAME
        self.status_prefix = f"{self.queue_name}:status"

    async def connect(self) -> None:
        """Establish Redis connection"""
        try:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True
            )
            await self._redis.ping()
            logger.info("Connected to Redis task queue")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self._redis = None
            raise

    async def disconnect(self) -> None:
        """Close Redis connection"""
        if self._redis:
            await self._redis.close()
            self._redis = None
            logger.info("Disconnected from Redis task queue")

    async def enqueue_task(
        self,
        task_type: str,
        task_data: Dict[str, Any],
        priority: int = 0
    ) -> str:
        """
        Enqueue a task for background processing

        Args:
            task_type: Type of task (e.g., 'registration_confirmation')
            task_data: Task input data
            priority: Task priority (higher = more priority)

        Returns:
            job_id: Unique identifier for the task
        """
        if not self._redis:
            await self.connect()

        job_id = str(uuid.uuid4())

        task_payload = {
            "job_id": job_id,
            "task_type": task_type,
            "task_data": task_data,
            "priority": priority,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

        try:
            await self.set_task_status(job_id, TaskStatus.QUEUED)
            await self._redis.zadd(
                self.queue_name,
                {json.dumps(task_payload): priority}
            )

            logger.info(f"Enqueued task {task_type} with job_id {job_id}")
            return job_id

        except Exception as e:
            logger.error(f"Failed to enqueue task {task_type}: {e}")
            raise

    async def dequeue_task(self, timeout: int = 10) -> Optional[Dict[str, Any]]:
        """
        Dequeue the highest priority task

        Args:
            timeout: Timeout in seconds for blocking pop

        Returns:
            Task payload or None if no tasks available
        """
        if not self._redis:
            await self.connect()

        try:
            result = await self._redis.bzpopmax(self.queue_name, timeout=timeout)

            if result:
                _, task_json, _ = result
                task_payload = json.loads(task_json)

                job_id = task_payload["job_id"]
                await self.set_task_status(job_id, TaskStatus.PROCESSING)

                logger.info(f"Dequeued task {task_payload['task_type']} with job_id {job_id}")
                return task_payload

            return None

        except Exception as e:
            logger.error(f"Failed to dequeue task: {e}")
            raise

    async def set_task_status(
        self,
        job_id: str,
        status: TaskStatus,
        result_data: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None
    ) -> None:
        """
        Update task status in Redis

        Args:
            job_id: Task job ID
            status: New status
            result_data: Task result data (for completed tasks)
            error_message: Error message (for failed tasks)
        """
        if not self._redis:
            await self.connect()

        try:
            status_data = {
                "status": status.value,
                "updated_at": datetime.now(timezone.utc).isoformat()
            }

            if result_data:
                status_data["result_data"] = result_data

            if error_message:
                status_data["error_message"] = error_message

            # Status entries expire after 7 days
            await self._redis.setex(
                f"{self.status_prefix}:{job_id}",
                timedelta(days=7),
                json.dumps(status_data)
            )

            logger.debug(f"Updated task {job_id} status to {status.value}")

        except Exception as e:
            logger.error(f"Failed to set task status for {job_id}: {e}")
            raise

    async def get_queue_stats(self) -> Dict[str, int]:
        """
        Get queue statistics

        Returns:
            Dictionary with queue statistics
        """
        if not self._redis:
            await self.connect()

        try:
            return {"queued_tasks": await self._redis.zcard(self.queue_name)}

        except Exception as e:
            logger.error(f"Failed to get queue stats: {e}")
            raise


# Global task queue instance
task_queue = TaskQueue()
