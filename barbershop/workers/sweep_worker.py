"""
Conversation sweep worker.
Deactivates idle WhatsApp conversations on a fixed interval.
"""

import asyncio
import logging

from barbershop.application.use_cases.sweep_conversations import ConversationSweeper

logger = logging.getLogger(__name__)


async def run_sweep_worker(sweeper: ConversationSweeper, interval_seconds: float) -> None:
    logger.info("Starting conversation sweep worker", extra={"interval_seconds": interval_seconds})

    while True:
        try:
            # Stores take per-row locks; keep them off the event loop thread.
            await asyncio.to_thread(sweeper.sweep)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Error in conversation sweep", extra={"error": str(e)})
        await asyncio.sleep(interval_seconds)
