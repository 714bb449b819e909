"""Background processor service for managing async tasks"""

import asyncio
import logging
from typing import Dict, Any, Optional, Callable, List
from datetime import datetime, timezone

from backend.app.core.task_queue import task_queue, TaskQueue, TaskStatus

logger = logging.getLogger(__name__)


class BackgroundProcessor:
    """Service for managing background task processing"""

    def __init__(self, queue: Optional[TaskQueue] = None):
        self.task_queue = queue or task_queue
        self.task_handlers: Dict[str, Callable] = {}
        self.is_running = False
        self.worker_tasks: List[asyncio.Task] = []

    def register_task_handler(self, task_type: str, handler: Callable) -> None:
        """
        Register a handler function for a specific task type

        Args:
            task_type: Type of task (e.g., 'registration_confirmation')
            handler: Async function to handle the task
        """
        self.task_handlers[task_type] = handler
        logger.info(f"Registered handler for task type: {task_type}")

    async def start_workers(self, num_workers: int = 2) -> None:
        """
        Start background worker tasks

        Args:
            num_workers: Number of concurrent workers to start
        """
        if self.is_running:
            logger.warning("Workers are already running")
            return

        self.is_running = True
        logger.info(f"Starting {num_workers} background workers")

        for i in range(num_workers):
            worker_task = asyncio.create_task(
                self._worker_loop(worker_id=i),
                name=f"background_worker_{i}"
            )
            self.worker_tasks.append(worker_task)

        logger.info(f"Started {num_workers} background workers")

    async def stop_workers(self) -> None:
        """Stop all background workers"""
        if not self.is_running:
            logger.warning("Workers are not running")
            return

        logger.info("Stopping background workers")
        self.is_running = False

        for task in self.worker_tasks:
            task.cancel()

        if self.worker_tasks:
            await asyncio.gather(*self.worker_tasks, return_exceptions=True)

        self.worker_tasks.clear()
        logger.info("Stopped all background workers")

    async def _worker_loop(self, worker_id: int) -> None:
        """
        Main worker loop for processing tasks

        Args:
            worker_id: Unique identifier for this worker
        """
        logger.info(f"Worker {worker_id} started")

        while self.is_running:
            try:
                task_payload = await self.task_queue.dequeue_task(timeout=5)

                if not task_payload:
                    continue

                await self.process_task(task_payload, worker_id)

            except asyncio.CancelledError:
                logger.info(f"Worker {worker_id} cancelled")
                break
            except Exception as e:
                logger.error(f"Worker {worker_id} error: {e}", exc_info=True)
                await asyncio.sleep(1)

        logger.info(f"Worker {worker_id} stopped")

    async def process_task(self, task_payload: Dict[str, Any], worker_id: int = 0) -> bool:
        """
        Process a single task

        A failing handler marks the task failed; it is not retried.

        Args:
            task_payload: Task data from queue
            worker_id: ID of the worker processing the task

        Returns:
            True if the handler completed
        """
        job_id = task_payload["job_id"]
        task_type = task_payload["task_type"]
        task_data = task_payload["task_data"]

        logger.info(f"Worker {worker_id} processing task {task_type}", extra={"job_id": job_id})

        handler = self.task_handlers.get(task_type)
        if not handler:
            error_message = f"No handler registered for task type: {task_type}"
            logger.error(error_message, extra={"job_id": job_id})
            await self.task_queue.set_task_status(
                job_id=job_id,
                status=TaskStatus.FAILED,
                error_message=error_message
            )
            return False

        try:
            start_time = datetime.now(timezone.utc)
            result = await handler(task_data)
            elapsed = (datetime.now(timezone.utc) - start_time).total_seconds()
        except Exception as e:
            error_message = f"Task failed: {str(e)}"
            logger.error(
                f"Worker {worker_id} failed task {task_type}: {error_message}",
                exc_info=True,
                extra={"job_id": job_id}
            )
            await self.task_queue.set_task_status(
                job_id=job_id,
                status=TaskStatus.FAILED,
                error_message=error_message
            )
            return False

        await self.task_queue.set_task_status(
            job_id=job_id,
            status=TaskStatus.COMPLETED,
            result_data={"result": result, "processing_time_seconds": elapsed}
        )
        logger.info(f"Worker {worker_id} completed task {task_type}", extra={"job_id": job_id})
        return True

    async def get_queue_stats(self) -> Dict[str, Any]:
        """
        Get queue statistics

        Returns:
            Dictionary with queue and worker statistics
        """
        redis_stats = await self.task_queue.get_queue_stats()
        return {
            "redis_queue": redis_stats,
            "workers_running": len(self.worker_tasks),
            "is_processing": self.is_running
        }


# Global background processor instance
background_processor = BackgroundProcessor()


def task_handler(task_type: str):
    """
    Decorator to register a function as a task handler

    Args:
        task_type: Type of task this handler processes
    """
    def decorator(func: Callable):
        background_processor.register_task_handler(task_type, func)
        return func
    return decorator
