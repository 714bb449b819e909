#!/usr/bin/env python3
"""Background worker script for processing tasks"""

import asyncio
import logging
import signal
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from backend.app.core.config import settings
from backend.app.core.logging import setup_logging
from backend.app.services.background_processor import background_processor, task_handler
from backend.app.services.email_service import EmailService
from backend.app.services.notification_service import REGISTRATION_CONFIRMATION_TASK

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

email_service = EmailService()


@task_handler(REGISTRATION_CONFIRMATION_TASK)
async def handle_registration_confirmation(task_data: dict) -> dict:
    """
    Send the confirmation email for a new registration

    Args:
        task_data: Contains ``email`` and ``full_name``

    Returns:
        Delivery summary
    """
    await email_service.send_registration_email(task_data["email"], task_data["full_name"])
    return {"email": task_data["email"], "sent": True}


class WorkerManager:
    """Manager for background worker processes"""

    def __init__(self, num_workers: int = 2):
        self.num_workers = num_workers
        self.shutdown_event = asyncio.Event()

    async def start(self):
        """Start the worker manager"""
        logger.info(f"Starting worker manager with {self.num_workers} workers")

        for sig in [signal.SIGTERM, signal.SIGINT]:
            signal.signal(sig, self._signal_handler)

        try:
            await background_processor.start_workers(self.num_workers)
            await self.log_queue_stats()
            await self.shutdown_event.wait()
        except Exception as e:
            logger.error(f"Worker manager error: {e}")
            raise
        finally:
            await background_processor.stop_workers()
            await self.log_queue_stats()
            await background_processor.task_queue.disconnect()
            logger.info("Worker manager stopped")

    async def log_queue_stats(self):
        """Log the queue backlog and worker state"""
        try:
            stats = await background_processor.get_queue_stats()
        except Exception as e:
            logger.warning(f"Could not read queue stats: {e}")
            return
        logger.info(f"Queue stats: {stats}", extra=stats)

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals"""
        logger.info(f"Received signal {signum}, initiating shutdown")
        self.shutdown_event.set()


async def main():
    """Main worker entry point"""
    import argparse

    parser = argparse.ArgumentParser(description="Registration Portal Notification Worker")
    parser.add_argument(
        "--workers",
        type=int,
        default=2,
        help="Number of concurrent workers (default: 2)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Log level (default: INFO)"
    )

    args = parser.parse_args()

    logging.getLogger().setLevel(getattr(logging, args.log_level))

    logger.info("Starting notification worker")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Queue: {settings.NOTIFICATION_QUEUE_NAME}")
    logger.info(f"Workers: {args.workers}")

    if not email_service.is_configured:
        logger.warning("SendGrid is not configured; confirmation emails will fail")

    manager = WorkerManager(num_workers=args.workers)

    try:
        await manager.start()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except Exception as e:
        logger.error(f"Worker failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
