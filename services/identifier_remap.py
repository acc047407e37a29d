# services/identifier_remap.py
"""
UUID <-> ULID identifier remap for users / projects / donations.

Used by alembic/versions/f2a7d9e1c4b3_convert_uuid_to_ulid.py:

    from alembic import op
    from services.identifier_remap import IdentifierRemap

    def upgrade() -> None:
        IdentifierRemap().upgrade(op)

How it works
------------
Every identifier column (primary keys and the foreign keys pointing at them)
gets a shadow column, the shadow is filled through a per-table mapping, the
old column is dropped and the shadow renamed into its place, then PK / FK /
index definitions are put back with their original names and cascade rules.

The mapping lives in the `identifier_remap_archive` table rather than in
memory. It is written before any column is dropped and it is what the
downgrade reads, so the downgrade restores the original UUIDs instead of
inventing new ones.

Each step is recorded in `identifier_remap_journal` once it completes and is
written to be re-runnable, so on a store without transactional DDL a failed
run can be resumed by running the migration again. On PostgreSQL the whole
sequence runs in Alembic's single migration transaction.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Set, Tuple

import sqlalchemy as sa
from sqlalchemy.engine import Connection

from config.settings import ID_REMAP_BATCH_SIZE, ID_REMAP_LOCK_TIMEOUT
from utils.ulid import ULID_LENGTH, MonotonicUlidGenerator

logger = logging.getLogger(__name__)

ARCHIVE_TABLE = "identifier_remap_archive"
JOURNAL_TABLE = "identifier_remap_journal"

PK_COLUMN = "id"

UPGRADE = "upgrade"
DOWNGRADE = "downgrade"

_ARCHIVE = sa.table(
    ARCHIVE_TABLE,
    sa.column("table_name", sa.String),
    sa.column("old_id", sa.String),
    sa.column("new_id", sa.String),
)

_JOURNAL = sa.table(
    JOURNAL_TABLE,
    sa.column("direction", sa.String),
    sa.column("step", sa.String),
)


class IdentifierRemapError(RuntimeError):
    """Raised when the remap detects a problem the database did not."""


class DuplicateIdentifierError(IdentifierRemapError):
    """Two distinct old identifiers were given the same new identifier."""


class DanglingReferenceError(IdentifierRemapError):
    """An identifier or reference has no counterpart in the mapping."""


class IrreversibleMigrationError(IdentifierRemapError):
    """The original identifiers cannot be restored."""


class OfflineMigrationError(IdentifierRemapError):
    """The remap reads row data and cannot be rendered as a SQL script."""


# ─── Table graph ───────────────────────────────────────────────────

@dataclass(frozen=True)
class ForeignKeySpec:
    column: str
    references: str
    nullable: bool = False
    onupdate: Optional[str] = "CASCADE"
    ondelete: Optional[str] = "CASCADE"

    def constraint_name(self, table: str) -> str:
        return f"{table}_{self.column}_fkey"

    def index_name(self, table: str) -> str:
        return f"ix_{table}_{self.column}"


@dataclass(frozen=True)
class TableSpec:
    name: str
    foreign_keys: Tuple[ForeignKeySpec, ...] = ()
    order_by: str = "createdAt"

    @property
    def pk_name(self) -> str:
        return f"{self.name}_pkey"

    @property
    def identifier_columns(self) -> Tuple[str, ...]:
        return (PK_COLUMN,) + tuple(fk.column for fk in self.foreign_keys)

    def references(self) -> List[Tuple[str, str, bool]]:
        """(column, table whose mapping translates it, nullable) for every identifier column."""
        pairs = [(PK_COLUMN, self.name, False)]
        pairs += [(fk.column, fk.references, fk.nullable) for fk in self.foreign_keys]
        return pairs


# Parents before children.
CROWDFUNDING_TABLES: Tuple[TableSpec, ...] = (
    TableSpec("users"),
    TableSpec(
        "projects",
        foreign_keys=(ForeignKeySpec("fundraiserId", "users"),),
    ),
    TableSpec(
        "donations",
        foreign_keys=(
            ForeignKeySpec("projectId", "projects"),
            ForeignKeySpec("userId", "users", nullable=True, ondelete="SET NULL"),
        ),
    ),
)


@dataclass(frozen=True)
class _Direction:
    name: str
    shadow_prefix: str
    column_type: Callable[[], sa.types.TypeEngine]
    # archive column matched against the current value / column holding the replacement
    source_key: str
    target_key: str


_TO_ULID = _Direction(UPGRADE, "ulid_", lambda: sa.String(ULID_LENGTH), "old_id", "new_id")
_TO_UUID = _Direction(DOWNGRADE, "uuid_", sa.Uuid, "new_id", "old_id")


def _column_names(conn: Connection, table: str) -> Set[str]:
    return {c["name"] for c in sa.inspect(conn).get_columns(table)}


def _has_table(conn: Connection, table: str) -> bool:
    return sa.inspect(conn).has_table(table)


# ─── Remap ─────────────────────────────────────────────────────────

class IdentifierRemap:
    UPGRADE_STEPS = (
        "build_mapping",
        "add_shadow_columns",
        "populate_shadow_columns",
        "drop_old_columns",
        "rename_shadow_columns",
        "restore_constraints",
        "finalize_columns",
    )
    DOWNGRADE_STEPS = ("extend_archive",) + UPGRADE_STEPS[1:]

    def __init__(
        self,
        tables: Sequence[TableSpec] = CROWDFUNDING_TABLES,
        *,
        batch_size: int = ID_REMAP_BATCH_SIZE,
        lock_timeout: Optional[str] = ID_REMAP_LOCK_TIMEOUT,
    ) -> None:
        self.tables = tuple(tables)
        self.batch_size = max(1, batch_size)
        self.lock_timeout = lock_timeout

    # public entry points -------------------------------------------------

    def upgrade(self, op, *, stop_after: Optional[str] = None) -> None:
        """UUID -> ULID. `op` is alembic's op proxy or an Operations instance."""
        self._run(op, _TO_ULID, self.UPGRADE_STEPS, stop_after)

    def downgrade(self, op, *, stop_after: Optional[str] = None) -> None:
        """ULID -> the archived UUIDs."""
        self._run(op, _TO_UUID, self.DOWNGRADE_STEPS, stop_after)

    def pending_steps(self, conn: Connection, direction: str = UPGRADE) -> List[str]:
        steps = self.UPGRADE_STEPS if direction == UPGRADE else self.DOWNGRADE_STEPS
        done = self._applied_steps(conn, direction)
        return [name for name in steps if name not in done]

    # driver ---------------------------------------------------------------

    def _run(self, op, direction: _Direction, steps: Sequence[str], stop_after: Optional[str]) -> None:
        if op.get_context().as_sql:
            raise OfflineMigrationError(
                "identifier remap reads existing rows; run this revision against a live database (no --sql)"
            )
        if stop_after is not None and stop_after not in steps:
            raise ValueError(f"unknown {direction.name} step: {stop_after!r}")

        conn = op.get_bind()
        self._lock_tables(conn)
        self._ensure_journal(op, conn)
        done = self._applied_steps(conn, direction.name)

        for name in steps:
            if name in done:
                logger.info("identifier remap %s: %s already applied, skipping", direction.name, name)
            else:
                logger.info("identifier remap %s: %s", direction.name, name)
                getattr(self, f"_{name}")(op, conn, direction)
                conn.execute(sa.insert(_JOURNAL).values(direction=direction.name, step=name))
            if name == stop_after:
                logger.info("identifier remap %s: stopped after %s", direction.name, name)
                return

        op.drop_table(JOURNAL_TABLE)
        if direction is _TO_UUID:
            op.drop_table(ARCHIVE_TABLE)
        logger.info("identifier remap %s: complete", direction.name)

    def _lock_tables(self, conn: Connection) -> None:
        if conn.dialect.name != "postgresql":
            logger.debug("identifier remap: no table locking on %s", conn.dialect.name)
            return
        if self.lock_timeout:
            conn.execute(
                sa.text("SELECT set_config('lock_timeout', :timeout, true)"),
                {"timeout": self.lock_timeout},
            )
        quote = conn.dialect.identifier_preparer.quote
        names = ", ".join(quote(spec.name) for spec in self.tables)
        conn.execute(sa.text(f"LOCK TABLE {names} IN ACCESS EXCLUSIVE MODE"))

    def _ensure_journal(self, op, conn: Connection) -> None:
        if _has_table(conn, JOURNAL_TABLE):
            return
        op.create_table(
            JOURNAL_TABLE,
            sa.Column("direction", sa.String(16), primary_key=True),
            sa.Column("step", sa.String(64), primary_key=True),
            sa.Column("applied_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )

    def _applied_steps(self, conn: Connection, direction: str) -> Set[str]:
        if not _has_table(conn, JOURNAL_TABLE):
            return set()
        rows = conn.execute(sa.select(_JOURNAL.c.step).where(_JOURNAL.c.direction == direction))
        return set(rows.scalars())

    # steps ----------------------------------------------------------------

    def _build_mapping(self, op, conn: Connection, direction: _Direction) -> None:
        if not _has_table(conn, ARCHIVE_TABLE):
            op.create_table(
                ARCHIVE_TABLE,
                sa.Column("table_name", sa.String(63), primary_key=True),
                sa.Column("old_id", sa.String(64), primary_key=True),
                sa.Column("new_id", sa.String(ULID_LENGTH), nullable=False),
                sa.Column("remapped_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
                sa.UniqueConstraint("new_id", name=f"uq_{ARCHIVE_TABLE}_new_id"),
            )

        generator = MonotonicUlidGenerator()
        for spec in self.tables:
            table = sa.table(spec.name, sa.column(PK_COLUMN), sa.column(spec.order_by, sa.DateTime))
            old_id = sa.cast(table.c[PK_COLUMN], sa.String)
            archived = sa.select(_ARCHIVE.c.old_id).where(_ARCHIVE.c.table_name == spec.name)
            rows = conn.execute(
                sa.select(old_id, table.c[spec.order_by])
                .where(old_id.not_in(archived))
                .order_by(table.c[spec.order_by], table.c[PK_COLUMN])
            ).all()

            mapped = [
                {"table_name": spec.name, "old_id": old, "new_id": generator.generate(created_at)}
                for old, created_at in rows
            ]
            for start in range(0, len(mapped), self.batch_size):
                conn.execute(sa.insert(_ARCHIVE), mapped[start:start + self.batch_size])
            logger.info("identifier remap: archived %d %s identifiers", len(mapped), spec.name)

        self._check_injective(conn)

    def _extend_archive(self, op, conn: Connection, direction: _Direction) -> None:
        if not _has_table(conn, ARCHIVE_TABLE):
            raise IrreversibleMigrationError(
                f"{ARCHIVE_TABLE} is missing; the original UUIDs were not kept and cannot be restored"
            )
        # Rows created after the upgrade never had a UUID; they get a new one.
        for spec in self.tables:
            table = sa.table(spec.name, sa.column(PK_COLUMN, sa.String))
            archived = sa.select(_ARCHIVE.c.new_id).where(_ARCHIVE.c.table_name == spec.name)
            new_rows = conn.execute(
                sa.select(table.c[PK_COLUMN]).where(table.c[PK_COLUMN].not_in(archived))
            ).scalars().all()
            if not new_rows:
                continue
            logger.warning(
                "identifier remap: %d %s rows postdate the upgrade; assigning fresh UUIDs",
                len(new_rows), spec.name,
            )
            minted = [
                {"table_name": spec.name, "old_id": str(uuid.uuid4()), "new_id": new_id}
                for new_id in new_rows
            ]
            for start in range(0, len(minted), self.batch_size):
                conn.execute(sa.insert(_ARCHIVE), minted[start:start + self.batch_size])

    def _add_shadow_columns(self, op, conn: Connection, direction: _Direction) -> None:
        for spec in self.tables:
            existing = _column_names(conn, spec.name)
            for column in spec.identifier_columns:
                shadow = direction.shadow_prefix + column
                if shadow not in existing:
                    op.add_column(spec.name, sa.Column(shadow, direction.column_type(), nullable=True))

    def _populate_shadow_columns(self, op, conn: Connection, direction: _Direction) -> None:
        for spec in self.tables:
            for column, mapped_by, _nullable in spec.references():
                shadow = direction.shadow_prefix + column
                table = sa.table(spec.name, sa.column(column), sa.column(shadow))
                lookup = (
                    sa.select(_ARCHIVE.c[direction.target_key])
                    .where(
                        _ARCHIVE.c.table_name == mapped_by,
                        _ARCHIVE.c[direction.source_key] == sa.cast(table.c[column], sa.String),
                    )
                    .correlate(table)
                    .scalar_subquery()
                )
                result = conn.execute(
                    sa.update(table).values({shadow: sa.cast(lookup, direction.column_type())})
                )
                logger.info(
                    "identifier remap %s: %s.%s filled (%d rows)",
                    direction.name, spec.name, shadow, result.rowcount,
                )
            self._check_shadow_complete(conn, spec, direction)

    def _drop_old_columns(self, op, conn: Connection, direction: _Direction) -> None:
        # Children first; dropping a column drops the FKs and indexes on it,
        # so nothing references a parent's id by the time it goes.
        for spec in reversed(self.tables):
            existing = _column_names(conn, spec.name)
            for column in reversed(spec.identifier_columns):
                if column in existing and direction.shadow_prefix + column in existing:
                    op.drop_column(spec.name, column)

    def _rename_shadow_columns(self, op, conn: Connection, direction: _Direction) -> None:
        for spec in self.tables:
            existing = _column_names(conn, spec.name)
            for column in spec.identifier_columns:
                shadow = direction.shadow_prefix + column
                if shadow in existing and column not in existing:
                    op.alter_column(spec.name, shadow, new_column_name=column)

    def _restore_constraints(self, op, conn: Connection, direction: _Direction) -> None:
        for spec in self.tables:
            pk = sa.inspect(conn).get_pk_constraint(spec.name)
            if pk.get("constrained_columns") != [PK_COLUMN]:
                op.create_primary_key(spec.pk_name, spec.name, [PK_COLUMN])

        for spec in self.tables:
            inspector = sa.inspect(conn)
            fk_names = {fk["name"] for fk in inspector.get_foreign_keys(spec.name)}
            index_names = {ix["name"] for ix in inspector.get_indexes(spec.name)}
            for fk in spec.foreign_keys:
                if fk.constraint_name(spec.name) not in fk_names:
                    op.create_foreign_key(
                        fk.constraint_name(spec.name),
                        spec.name,
                        fk.references,
                        [fk.column],
                        [PK_COLUMN],
                        onupdate=fk.onupdate,
                        ondelete=fk.ondelete,
                    )
                if fk.index_name(spec.name) not in index_names:
                    op.create_index(fk.index_name(spec.name), spec.name, [fk.column])

    def _finalize_columns(self, op, conn: Connection, direction: _Direction) -> None:
        for spec in self.tables:
            for column, _mapped_by, nullable in spec.references():
                op.alter_column(
                    spec.name,
                    column,
                    existing_type=direction.column_type(),
                    nullable=nullable,
                )

    # checks ---------------------------------------------------------------

    def _check_injective(self, conn: Connection) -> None:
        duplicate = conn.execute(
            sa.select(_ARCHIVE.c.new_id, sa.func.count())
            .group_by(_ARCHIVE.c.new_id)
            .having(sa.func.count() > 1)
            .limit(1)
        ).first()
        if duplicate is not None:
            raise DuplicateIdentifierError(
                f"new identifier {duplicate[0]} assigned to {duplicate[1]} old identifiers"
            )

    def _check_shadow_complete(self, conn: Connection, spec: TableSpec, direction: _Direction) -> None:
        for column, _mapped_by, nullable in spec.references():
            shadow = direction.shadow_prefix + column
            table = sa.table(spec.name, sa.column(column), sa.column(shadow))
            unmapped = table.c[shadow].is_(None)
            if nullable:
                unmapped = sa.and_(unmapped, table.c[column].is_not(None))
            missing = conn.execute(
                sa.select(sa.func.count()).select_from(table).where(unmapped)
            ).scalar_one()
            if missing:
                raise DanglingReferenceError(
                    f"{spec.name}.{column}: {missing} row(s) have no mapped identifier"
                )
