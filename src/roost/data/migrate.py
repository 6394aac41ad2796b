"""Forward-only SQL migration runner.

Migrations are numbered ``.sql`` files in a directory::

    migrations/
        001_create_sessions.sql
        002_create_users.sql

Applied migrations are tracked per *source* in a ``_roost_migrations``
table, so roost's own schema (source ``"roost"``) and an application's
migrations (source ``"app"``) can both start numbering at 001.

Usage::

    from roost.data import Database, migrate

    db = Database("sqlite:///app.db")
    await migrate(db, BUILTIN_MIGRATIONS, source="roost")
    await migrate(db, "migrations/")
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from roost.data.database import Database
from roost.data.errors import MigrationError

logger = logging.getLogger("roost.data")

BUILTIN_MIGRATIONS = Path(__file__).parent / "migrations"
"""Schema the runtime itself needs: the ``sessions`` and ``users`` tables."""

_TRACKING_TABLE = "_roost_migrations"

_CREATE_TRACKING_SQL = f"""
CREATE TABLE IF NOT EXISTS {_TRACKING_TABLE} (
    source     TEXT    NOT NULL,
    version    INTEGER NOT NULL,
    name       TEXT    NOT NULL,
    applied_at TEXT    NOT NULL,
    PRIMARY KEY (source, version)
)
"""


@dataclass(frozen=True, slots=True)
class Migration:
    """A single migration file."""

    version: int
    name: str
    sql: str


@dataclass(frozen=True, slots=True)
class MigrationResult:
    """Result of running migrations."""

    applied: list[str]
    already_applied: int
    total_available: int

    @property
    def summary(self) -> str:
        if not self.applied:
            return f"Already up to date ({self.already_applied} migrations applied)"
        return f"Applied {len(self.applied)} migration(s): {', '.join(self.applied)}"


@dataclass(frozen=True, slots=True)
class _Applied:
    version: int


def discover_migrations(directory: str | Path) -> list[Migration]:
    """Parse ``NNN_description.sql`` files from *directory*, sorted by version.

    Raises ``MigrationError`` for a missing directory, a malformed or empty
    file, or duplicate version numbers.
    """
    path = Path(directory)
    if not path.is_dir():
        msg = f"Migration directory does not exist: {path}"
        raise MigrationError(msg)

    migrations: list[Migration] = []
    for sql_file in sorted(path.glob("*.sql")):
        prefix, sep, _ = sql_file.stem.partition("_")
        if not sep:
            msg = f"Invalid migration filename: {sql_file.name} (expected NNN_description.sql)"
            raise MigrationError(msg)
        try:
            version = int(prefix)
        except ValueError:
            msg = f"Invalid migration version in {sql_file.name}: {prefix!r} is not an integer"
            raise MigrationError(msg) from None

        sql = sql_file.read_text(encoding="utf-8").strip()
        if not sql:
            msg = f"Empty migration file: {sql_file.name}"
            raise MigrationError(msg)
        migrations.append(Migration(version=version, name=sql_file.stem, sql=sql))

    versions = [m.version for m in migrations]
    if len(versions) != len(set(versions)):
        msg = f"Duplicate migration version numbers in {path}"
        raise MigrationError(msg)

    migrations.sort(key=lambda m: m.version)
    return migrations


async def migrate(db: Database, directory: str | Path, *, source: str = "app") -> MigrationResult:
    """Apply pending migrations from *directory* in version order.

    Each migration's script runs before its tracking row is written, so a
    failing file is retried on the next run.

    Raises:
        MigrationError: If the directory is invalid or a migration fails.
    """
    migrations = discover_migrations(directory)
    await db.execute(_CREATE_TRACKING_SQL)
    rows = await db.fetch(
        _Applied, f"SELECT version FROM {_TRACKING_TABLE} WHERE source = ?", source
    )
    applied_versions = {row.version for row in rows}

    applied: list[str] = []
    for migration in migrations:
        if migration.version in applied_versions:
            continue
        try:
            await db.execute_script(migration.sql)
            await db.execute(
                f"INSERT INTO {_TRACKING_TABLE} (source, version, name, applied_at) "
                "VALUES (?, ?, ?, ?)",
                source,
                migration.version,
                migration.name,
                datetime.now(UTC).isoformat(),
            )
        except Exception as exc:
            msg = f"Migration {migration.name} failed: {exc}"
            raise MigrationError(msg) from exc
        logger.info("Applied migration %s/%s", source, migration.name)
        applied.append(migration.name)

    return MigrationResult(
        applied=applied,
        already_applied=len(applied_versions),
        total_available=len(migrations),
    )
