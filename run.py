import os

import uvicorn


def run_migrations():
    """Run Alembic migrations."""
    from alembic import command
    from alembic.config import Config

    alembic_cfg = Config("alembic.ini")
    print("[STARTUP] Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    print("[STARTUP] Migrations complete!")


if __name__ == "__main__":
    from propertech_scheduling.core.config import settings

    if os.getenv("RUN_MIGRATIONS") == "true":
        run_migrations()

    host = os.environ.get("HOST", settings.HOST)
    port = int(os.environ.get("PORT", settings.PORT))

    # Disable reload in production
    reload = os.getenv("ENV") == "development" or settings.RELOAD

    uvicorn.run(
        "propertech_scheduling.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.LOG_LEVEL.lower(),
        workers=1,
    )
