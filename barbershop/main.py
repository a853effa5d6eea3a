import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from barbershop.api.v1.appointments import router as appointments_router
from barbershop.api.webhooks import router as webhooks_router
from barbershop.core.config import settings
from barbershop.wiring.dependencies import get_conversation_sweeper
from barbershop.workers.sweep_worker import run_sweep_worker


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in (
            "phone",
            "message_id",
            "step",
            "appointment_id",
            "tracking_code",
            "employee_id",
            "action",
            "reason",
            "count",
            "error",
        ):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    sweep_task = asyncio.create_task(
        run_sweep_worker(get_conversation_sweeper(), settings.SWEEP_INTERVAL_SECONDS)
    )
    yield
    logger.info("Application shutting down...")
    sweep_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweep_task


app = FastAPI(title="Barbershop WhatsApp Scheduling", version="1.0.0", lifespan=lifespan)

app.include_router(webhooks_router, tags=["webhooks"])
app.include_router(appointments_router, prefix="/api/v1/appointments", tags=["appointments"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
