"""
Row-level-security policies per table, and the runtime repair used by /admin/permissions.

The same declarations feed the Alembic migration (0002_access_policies), so a repair simply
re-applies what the migration installed. Requests identify themselves to the database with
SET LOCAL naturalpuff.user_id / naturalpuff.is_admin; the policies read those settings.
"""
import logging
from dataclasses import dataclass, field

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from naturalpuff.core.database import engine, supports_row_level_security
from naturalpuff.models import ContactMessage

log = logging.getLogger("naturalpuff.permissions")

IS_ADMIN = "coalesce(current_setting('naturalpuff.is_admin', true), '') = 'true'"
CURRENT_USER = "nullif(current_setting('naturalpuff.user_id', true), '')::int"
AUTHENTICATED = f"({CURRENT_USER} IS NOT NULL OR {IS_ADMIN})"


@dataclass(frozen=True)
class Policy:
    name: str
    command: str  # SELECT | INSERT | UPDATE | DELETE | ALL
    using: str | None = None
    check: str | None = None


TABLE_POLICIES: dict[str, tuple[Policy, ...]] = {
    "orders": (
        Policy("orders_insert_any", "INSERT", check="true"),
        Policy("orders_select_own", "SELECT", using=f"user_id = {CURRENT_USER} OR {IS_ADMIN}"),
        Policy("orders_update_admin", "UPDATE", using=IS_ADMIN, check=IS_ADMIN),
    ),
    "order_items": (
        Policy("order_items_insert_any", "INSERT", check="true"),
        Policy(
            "order_items_select_own",
            "SELECT",
            using=(
                f"{IS_ADMIN} OR EXISTS (SELECT 1 FROM orders o "
                f"WHERE o.id = order_items.order_id AND o.user_id = {CURRENT_USER})"
            ),
        ),
    ),
    "products": (
        Policy("products_select_all", "SELECT", using="true"),
        Policy("products_write_admin", "ALL", using=IS_ADMIN, check=IS_ADMIN),
    ),
    "coupons": (
        Policy("coupons_select_active", "SELECT", using=f"is_active OR {IS_ADMIN}"),
        Policy("coupons_write_admin", "ALL", using=IS_ADMIN, check=IS_ADMIN),
    ),
    "contact_messages": (
        Policy("contact_messages_insert_anon", "INSERT", check="true"),
        Policy("contact_messages_select_authenticated", "SELECT", using=AUTHENTICATED),
        Policy("contact_messages_update_authenticated", "UPDATE", using=AUTHENTICATED, check=AUTHENTICATED),
    ),
}


class PolicyRepairError(Exception):
    def __init__(self, table: str, message: str):
        super().__init__(f"Error configuring {table} policies: {message}")
        self.table = table
        self.message = message


@dataclass
class TableResult:
    table: str
    status: str  # applied | skipped | failed | dry_run
    statements: list[str] = field(default_factory=list)
    error: str | None = None

    def as_dict(self) -> dict:
        out = {"table": self.table, "status": self.status}
        if self.statements:
            out["statements"] = self.statements
        if self.error:
            out["error"] = self.error
        return out


def policy_units(table: str) -> list[list[str]]:
    """
    DDL that (re)installs every policy of the table, grouped into units that must commit together:
    enabling RLS, then one DROP + CREATE pair per policy. Safe to run repeatedly.
    """
    if table not in TABLE_POLICIES:
        raise KeyError(table)
    units = [[f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY"]]
    for p in TABLE_POLICIES[table]:
        sql = f"CREATE POLICY {p.name} ON {table} FOR {p.command} TO PUBLIC"
        if p.using:
            sql += f" USING ({p.using})"
        if p.check:
            sql += f" WITH CHECK ({p.check})"
        units.append([f"DROP POLICY IF EXISTS {p.name} ON {table}", sql])
    return units


def policy_statements(table: str) -> list[str]:
    return [sql for unit in policy_units(table) for sql in unit]


def drop_statements(table: str) -> list[str]:
    statements = [f"DROP POLICY IF EXISTS {p.name} ON {table}" for p in TABLE_POLICIES[table]]
    statements.append(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY")
    return statements


def _run_in_transaction(statements: list[str]) -> None:
    """All statements commit together or none do."""
    with engine.begin() as conn:
        for sql in statements:
            conn.execute(text(sql))


def apply_table(table: str, dry_run: bool = False) -> TableResult:
    """Re-applies one table's policies in its own transaction. Raises PolicyRepairError on failure."""
    statements = policy_statements(table)
    if dry_run:
        return TableResult(table, "dry_run", statements)
    if not supports_row_level_security():
        log.info("Row-level security not supported by %s; %s skipped", engine.dialect.name, table)
        return TableResult(table, "skipped")
    try:
        _run_in_transaction(statements)
    except SQLAlchemyError as e:
        log.error("Policy repair failed for %s: %s", table, e)
        raise PolicyRepairError(table, str(getattr(e, "orig", None) or e)) from e
    log.info("Policies applied: %s", table)
    return TableResult(table, "applied")


def repair_tables(tables: list[str], dry_run: bool = False) -> list[TableResult]:
    """Tables in order; the first failure stops the run (PolicyRepairError)."""
    return [apply_table(t, dry_run=dry_run) for t in tables]


def repair_with_fallback(tables: list[str], dry_run: bool = False) -> dict:
    """
    One aggregate transaction for all tables first. If it fails, each table (a single table:
    each policy) is retried on its own and the outcome reported as partial.
    """
    all_statements = [s for t in tables for s in policy_statements(t)]
    if dry_run:
        return {
            "success": True,
            "partial": False,
            "fallback": False,
            "tables": [TableResult(t, "dry_run", policy_statements(t)).as_dict() for t in tables],
        }
    if not supports_row_level_security():
        return {
            "success": True,
            "partial": False,
            "fallback": False,
            "tables": [TableResult(t, "skipped").as_dict() for t in tables],
        }
    try:
        _run_in_transaction(all_statements)
        log.info("Policies applied (aggregate): %s", ", ".join(tables))
        return {
            "success": True,
            "partial": False,
            "fallback": False,
            "tables": [TableResult(t, "applied").as_dict() for t in tables],
        }
    except SQLAlchemyError as e:
        log.warning("Aggregate policy repair failed, falling back: %s", e)
        aggregate_error = str(getattr(e, "orig", None) or e)

    if len(tables) == 1:
        results = _fallback_units(tables[0])
    else:
        results = []
        for t in tables:
            try:
                results.append(apply_table(t))
            except PolicyRepairError as err:
                results.append(TableResult(t, "failed", error=err.message))
    applied = [r for r in results if r.status == "applied"]
    failed = [r for r in results if r.status == "failed"]
    return {
        "success": bool(applied),
        "partial": bool(applied) and bool(failed),
        "fallback": True,
        "aggregate_error": aggregate_error,
        "tables": [r.as_dict() for r in results],
    }


def _fallback_units(table: str) -> list[TableResult]:
    """Each unit (RLS switch, or one policy's DROP + CREATE) in its own transaction; one result per unit."""
    results = []
    for unit in policy_units(table):
        try:
            _run_in_transaction(unit)
            results.append(TableResult(table, "applied", unit))
        except SQLAlchemyError as e:
            results.append(TableResult(table, "failed", unit, error=str(getattr(e, "orig", None) or e)))
    return results


def setup_contact_messages(dry_run: bool = False) -> dict:
    """Creates contact_messages when missing, then applies its policies."""
    existed = inspect(engine).has_table(ContactMessage.__tablename__)
    if not existed and not dry_run:
        ContactMessage.__table__.create(engine, checkfirst=True)
        log.info("contact_messages table created")
    result = apply_table("contact_messages", dry_run=dry_run)
    return {
        "success": True,
        "table": "already exists" if existed else ("would be created" if dry_run else "created"),
        "policies": result.as_dict(),
    }
