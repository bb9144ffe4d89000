from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from supabase import create_client, Client

from config import get_settings
from services.change_feed import ChangeFeed, Subscription, SupabaseChangeFeed


@lru_cache(maxsize=1)
def get_client() -> Client:
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_key:
        raise RuntimeError("Set SUPABASE_URL and SUPABASE_KEY in .env or environment variables")
    return create_client(settings.supabase_url, settings.supabase_key)


def _table(table_name: str):
    return get_client().schema(get_settings().schema).table(table_name)


def insert_row(table_name: str, row: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Insert a single row.
    Returns (ok, message, inserted_row)
    """
    try:
        resp = _table(table_name).insert(row).execute()

        if getattr(resp, "error", None):
            return False, f"Insert failed: {resp.error}", None

        inserted = resp.data[0] if resp.data else None
        if inserted is None:
            return False, "Insert failed: no data returned", None
        return True, "Inserted", inserted

    except Exception as e:
        return False, str(e), None


PAGE_SIZE = 1000


def fetch_rows(
        table_name: str,
        columns: str = "*",
        order_by: Sequence[Tuple[str, bool]] = (),
        page_size: int = PAGE_SIZE,
) -> Tuple[bool, str, List[Dict[str, Any]]]:
    """
    Fetch all rows of a table, one page at a time.

    PostgREST caps a single response at `max_rows`, so this keeps asking for
    the next range until a short page comes back. `order_by` is a list of
    (column, descending) pairs applied in order; `id` is added as a tiebreak
    so pages do not overlap.
    Returns (ok, message, rows)
    """
    ordering = list(order_by)
    if not any(col == "id" for col, _ in ordering):
        ordering.append(("id", False))

    rows: List[Dict[str, Any]] = []
    start = 0
    try:
        while True:
            query = _table(table_name).select(columns)
            for col, descending in ordering:
                query = query.order(col, desc=descending)

            resp = query.range(start, start + page_size - 1).execute()

            if getattr(resp, "error", None):
                return False, f"Fetch failed: {resp.error}", []

            page = list(resp.data or [])
            rows.extend(page)
            if len(page) < page_size:
                break
            start += page_size

    except Exception as e:
        return False, f"Unexpected error: {e}", []

    if not rows:
        return True, "No rows found", []
    return True, "Fetched", rows


def delete_row(table_name: str, row_id: Any) -> Tuple[bool, str, List[Dict[str, Any]]]:
    """
    Delete one row by id.
    Returns (ok, message, deleted_rows); an unknown id gives (True, ..., []).
    """
    try:
        resp = _table(table_name).delete().eq("id", row_id).execute()

        if getattr(resp, "error", None):
            return False, f"Delete failed: {resp.error}", []

        deleted = list(resp.data or [])
        if not deleted:
            return True, "No row with that id", []
        return True, "Deleted", deleted

    except Exception as e:
        return False, str(e), []


def upsert_rows(
        table_name: str,
        rows: List[Dict[str, Any]],
        conflict_cols: List[str],
) -> Tuple[bool, str, int]:
    """
    Upsert a batch of rows. Returns (ok, message, row_count)
    """
    try:
        resp = _table(table_name).upsert(rows, on_conflict=",".join(conflict_cols)).execute()

        if getattr(resp, "error", None):
            return False, f"Upsert failed: {resp.error}", 0

        return True, "Upserted", len(resp.data or rows)

    except Exception as e:
        return False, str(e), 0


class SupabaseBackend:
    """
    The persistence + change notification surface used by TransactionStore
    and the menu service, backed by the functions above.
    """

    def __init__(self, change_feeds: Optional[Dict[str, ChangeFeed]] = None):
        self._change_feeds: Dict[str, ChangeFeed] = dict(change_feeds or {})

    def insert(self, table_name: str, record: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
        return insert_row(table_name, record)

    def select(
            self,
            table_name: str,
            order_by: Sequence[Tuple[str, bool]] = (),
    ) -> Tuple[bool, str, List[Dict[str, Any]]]:
        return fetch_rows(table_name, order_by=order_by)

    def delete_row(self, table_name: str, row_id: Any) -> Tuple[bool, str, List[Dict[str, Any]]]:
        return delete_row(table_name, row_id)

    def upsert(self, table_name: str, rows: List[Dict[str, Any]], conflict_cols: List[str]) -> Tuple[bool, str, int]:
        return upsert_rows(table_name, rows, conflict_cols)

    def _feed_for(self, table_name: str) -> ChangeFeed:
        feed = self._change_feeds.get(table_name)
        if feed is None:
            settings = get_settings()
            if not settings.supabase_url or not settings.supabase_key:
                raise RuntimeError("Set SUPABASE_URL and SUPABASE_KEY in .env or environment variables")
            feed = SupabaseChangeFeed(
                settings.supabase_url,
                settings.supabase_key,
                schema=settings.schema,
                table=table_name,
            )
            self._change_feeds[table_name] = feed
        return feed

    def subscribe_to_changes(self, table_name: str, on_change: Callable[[], None]) -> Subscription:
        return self._feed_for(table_name).subscribe(on_change)

    def unsubscribe(self, subscription: Subscription) -> None:
        feed = self._change_feeds.get(subscription.table)
        if feed is not None:
            feed.unsubscribe(subscription)
