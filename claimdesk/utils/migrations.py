import logging
import os

from sqlalchemy import text

logger = logging.getLogger(__name__)

ADVISORY_LOCK_KEY = 9142026


def _alembic_ini_path() -> str:
    return os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "alembic.ini")


def _get_head_revision() -> str:
    from alembic.config import Config
    from alembic.script import ScriptDirectory

    ini_path = _alembic_ini_path()
    if not os.path.exists(ini_path):
        return "unknown"
    cfg = Config(ini_path)
    script = ScriptDirectory.from_config(cfg)
    head = script.get_current_head()
    return head or "unknown"


def _get_current_revision(engine) -> str:
    try:
        with engine.connect() as conn:
            result = conn.execute(text("SELECT version_num FROM alembic_version LIMIT 1"))
            row = result.fetchone()
            return row[0] if row else "none"
    except Exception:
        return "none"


def get_migration_state(engine) -> dict:
    current = _get_current_revision(engine)
    head = _get_head_revision()
    return {
        "current_revision": current,
        "head_revision": head,
        "migration_pending": current != head,
    }


def run_migrations_if_enabled(engine) -> None:
    from ..config import get_settings

    settings = get_settings()
    enabled = settings.run_migrations_on_startup.lower() == "true"

    if not enabled:
        logger.info("RUN_MIGRATIONS_ON_STARTUP is not enabled; skipping auto-migration")
        return

    from alembic import command
    from alembic.config import Config

    cfg = Config(_alembic_ini_path())
    cfg.set_main_option("sqlalchemy.url", engine.url.render_as_string(hide_password=False))

    if engine.dialect.name != "postgresql":
        logger.info("Running alembic upgrade head without advisory lock (%s)", engine.dialect.name)
        command.upgrade(cfg, "head")
        return

    logger.info("Acquiring advisory lock %d for migrations", ADVISORY_LOCK_KEY)
    with engine.connect() as conn:
        conn.execute(text("SELECT pg_advisory_lock(:key)"), {"key": ADVISORY_LOCK_KEY})
        try:
            logger.info("Advisory lock acquired; running alembic upgrade head")
            command.upgrade(cfg, "head")
            logger.info("Migrations complete")
        except Exception as exc:
            logger.error("Migration failed: %s", exc)
            raise
        finally:
            conn.execute(text("SELECT pg_advisory_unlock(:key)"), {"key": ADVISORY_LOCK_KEY})
            logger.info("Advisory lock released")
