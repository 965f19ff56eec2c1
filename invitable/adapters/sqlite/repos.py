import logging
import sqlite3
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from invitable.domain.entities import Account, ConfirmationState

logger = logging.getLogger(__name__)


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


def _parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


class SQLiteAccountRepo:
    """
    Account store.

    save() is an upsert on id. Constraint violations (duplicate email or
    token, missing email) and other database errors (locked database,
    missing schema) make it return False; the in-memory account is left
    as the caller mutated it.
    """

    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def save(self, account: Account) -> bool:
        confirmation = account.confirmation
        updated_at = datetime.now(UTC)
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO accounts (
                    id, email, display_name, invitation_token,
                    invitation_created_at, invitation_sent_at, invitation_accepted_at,
                    invited_by, confirmation_required, confirmed_at,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    display_name=excluded.display_name,
                    invitation_token=excluded.invitation_token,
                    invitation_created_at=excluded.invitation_created_at,
                    invitation_sent_at=excluded.invitation_sent_at,
                    invitation_accepted_at=excluded.invitation_accepted_at,
                    invited_by=excluded.invited_by,
                    confirmation_required=excluded.confirmation_required,
                    confirmed_at=excluded.confirmed_at,
                    updated_at=excluded.updated_at
            """,
                (
                    str(account.id),
                    account.email or None,
                    account.display_name,
                    account.invitation_token,
                    _iso(account.invitation_created_at),
                    _iso(account.invitation_sent_at),
                    _iso(account.invitation_accepted_at),
                    str(account.invited_by) if account.invited_by else None,
                    int(confirmation.required) if confirmation else None,
                    _iso(confirmation.confirmed_at) if confirmation else None,
                    account.created_at.isoformat(),
                    updated_at.isoformat(),
                ),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            logger.warning("Account %s not saved: %s", account.id, e)
            return False
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Account %s not saved, database error: %s", account.id, e)
            return False
        finally:
            conn.close()

        account.updated_at = updated_at
        return True

    def is_persisted(self, account: Account) -> bool:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT 1 AS present FROM accounts WHERE id = ?", (str(account.id),)
            ).fetchone()
            return row is not None
        except sqlite3.Error as e:
            logger.error("Could not check account %s: %s", account.id, e)
            return False
        finally:
            conn.close()

    def get_by_id(self, account_id: UUID) -> Account | None:
        return self._get_one("SELECT * FROM accounts WHERE id = ?", str(account_id))

    def get_by_email(self, email: str) -> Account | None:
        return self._get_one("SELECT * FROM accounts WHERE email = ?", email)

    def get_by_invitation_token(self, token: str) -> Account | None:
        return self._get_one("SELECT * FROM accounts WHERE invitation_token = ?", token)

    def _get_one(self, query: str, value: str) -> Account | None:
        conn = self._get_conn()
        try:
            row = conn.execute(query, (value,)).fetchone()
            if not row:
                return None
            return self._map_row(row)
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Account:
        confirmation = None
        if row["confirmation_required"] is not None:
            confirmation = ConfirmationState(
                required=bool(row["confirmation_required"]),
                confirmed_at=_parse_dt(row["confirmed_at"]),
            )

        return Account(
            id=UUID(row["id"]),
            email=row["email"],
            display_name=row["display_name"],
            invitation_token=row["invitation_token"],
            invitation_created_at=_parse_dt(row["invitation_created_at"]),
            invitation_sent_at=_parse_dt(row["invitation_sent_at"]),
            invitation_accepted_at=_parse_dt(row["invitation_accepted_at"]),
            invited_by=UUID(row["invited_by"]) if row["invited_by"] else None,
            confirmation=confirmation,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
