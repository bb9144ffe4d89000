import argparse
import csv
import logging
from typing import Dict, Iterable, List, Optional

from config import MENU_ITEMS_TABLE, configure_logging
from data_integrator import SupabaseBackend
from domain.menu_catalog import DEFAULT_MENU

logger = logging.getLogger(__name__)

BATCH_SIZE = 500
MENU_COLUMNS = ["name", "price", "category", "description", "is_available"]
REQUIRED_COLUMNS = ["name", "price", "category"]


def chunked(items: List[Dict], size: int) -> Iterable[List[Dict]]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


def read_menu_csv(file_name: str) -> List[Dict]:
    """
    Read a headered menu CSV. Only MENU_COLUMNS are kept; other columns are
    ignored and blank cells become None.
    """
    with open(file_name, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        header = [c.strip() for c in (reader.fieldnames or []) if c]
        missing = [c for c in REQUIRED_COLUMNS if c not in header]
        if missing:
            raise ValueError(f"Menu CSV missing columns: {missing}. Found: {header}")

        rows = []
        for raw in reader:
            cells = {k.strip(): (v.strip() if isinstance(v, str) else v) for k, v in raw.items() if k}
            rows.append({c: cells.get(c) or None for c in MENU_COLUMNS})
    return rows


def dedupe_by_name(rows: List[Dict]) -> List[Dict]:
    """First row per trimmed name wins; nameless rows are dropped."""
    seen = set()
    out: List[Dict] = []
    for r in rows:
        name = (r.get("name") or "").strip()
        if not name or name in seen:
            continue
        seen.add(name)
        out.append({**r, "name": name})
    return out


def _to_bool(val) -> bool:
    if val is None:
        return True
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in ("1", "true", "ya", "yes", "y")


def normalize_menu_rows(rows: List[Dict]) -> List[Dict]:
    """Coerce CSV strings into menu_items column types."""
    out = []
    for r in rows:
        out.append({
            "name": r["name"],
            "price": int(float(r["price"])),
            "category": str(r["category"]).strip().lower(),
            "description": r.get("description"),
            "is_available": _to_bool(r.get("is_available")),
        })
    return out


def default_menu_rows() -> List[Dict]:
    return [
        {
            "name": item.name,
            "price": item.price,
            "category": item.category,
            "description": item.description,
            "is_available": item.is_available,
        }
        for item in DEFAULT_MENU
    ]


def seed_menu(backend, rows: List[Dict], batch_size: int = BATCH_SIZE) -> int:
    """
    Upsert menu rows into menu_items, deduplicated on name.
    Returns number of rows sent; raises RuntimeError on the first failed batch.
    """
    deduped = dedupe_by_name(rows)
    if not deduped:
        logger.info("No valid menu rows to insert (after dedupe / missing name filtering).")
        return 0

    total = 0
    for batch in chunked(deduped, batch_size):
        ok, msg, count = backend.upsert(MENU_ITEMS_TABLE, batch, ["name"])
        if not ok:
            raise RuntimeError(f"Upsert into {MENU_ITEMS_TABLE} failed after {total} rows: {msg}")
        total += count
        logger.info("Upserted %s menu rows (running total: %s)", count, total)

    return total


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Seed the menu_items table.")
    parser.add_argument("--csv", help=f"headered CSV with columns {', '.join(MENU_COLUMNS)}")
    args = parser.parse_args(argv)

    configure_logging()

    if args.csv:
        rows = normalize_menu_rows(dedupe_by_name(read_menu_csv(args.csv)))
    else:
        rows = default_menu_rows()

    total = seed_menu(SupabaseBackend(), rows)
    logger.info("Done: %s <- %s (%s unique rows)", MENU_ITEMS_TABLE, args.csv or "default menu", total)


if __name__ == "__main__":
    main()
