import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from smartduck.api.webhooks import router as webhooks_router
from smartduck.core.config import settings
from smartduck.wiring.dependencies import get_knowledge_base_store

VERSION = "0.1.0"


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("message_id", "recipient_id", "intent", "language", "confidence", "reply_text", "reason"):
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

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    missing = settings.missing_required()
    if missing:
        logger.warning("Missing env variables: %s", ", ".join(missing))
    # A LoadError here aborts startup: the bot never serves without its data.
    get_knowledge_base_store().load()
    logger.info("SmartDuck bot ready", extra={"language": settings.DEFAULT_LOCALE})
    yield


app = FastAPI(title="SmartDuck WhatsApp Bot", version=VERSION, lifespan=lifespan)

app.include_router(webhooks_router, tags=["webhooks"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "version": VERSION}
