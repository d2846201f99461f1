from boardsync import settings  # load .env
from fastapi import FastAPI, Request, Header, HTTPException
from contextlib import asynccontextmanager
from typing import Optional

from boardsync.board.engine import EngineRegistry
from boardsync.config.board import load_board_config
from boardsync.security.webhook_verify import verify_signature
from boardsync.github.events import handle_event
from boardsync.logger import get_logger
from boardsync.settings import validate_board_settings, validate_github_settings


logger = get_logger()


def create_app(
    registry: Optional[EngineRegistry] = None,
    webhook_secret: Optional[str] = None,
) -> FastAPI:
    secret = webhook_secret or settings.GITHUB_WEBHOOK_SECRET

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.registry is None:
            # Validate critical configuration early
            validate_github_settings()
            validate_board_settings()

            configs = load_board_config(settings.BOARD_CONFIG_PATH)
            app.state.registry = EngineRegistry(configs)
            logger.info("Board engines ready for %d repositories", len(configs))

        try:
            yield
        finally:
            # Let pending lock/reopen cycles finish before exiting
            await app.state.registry.shutdown(drain=True)
            logger.info("Post processing drained")

    app = FastAPI(lifespan=lifespan)
    app.state.registry = registry

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/webhook")
    async def github_webhook(
        request: Request,
        x_hub_signature_256: str | None = Header(None),
        x_github_event: str | None = Header(None),
    ):
        body = await request.body()

        if not x_hub_signature_256:
            raise HTTPException(status_code=401, detail="Missing signature header")

        if not verify_signature(body, x_hub_signature_256, secret):
            raise HTTPException(status_code=401, detail="Invalid signature")

        if not x_github_event:
            raise HTTPException(status_code=400, detail="Missing GitHub event header")

        payload = await request.json()
        logger.info("Received GitHub event: %s", x_github_event)

        status = await handle_event(app.state.registry, x_github_event, payload)
        return {"status": status}

    return app


app = create_app()


# 👇 This makes `python -m boardsync.main` work
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "boardsync.main:app",
        host="0.0.0.0",
        port=8000,
        reload=False,
    )
