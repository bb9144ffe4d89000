# warung/utils/formatting.py

from datetime import datetime, tzinfo
from typing import Optional

BULAN_SINGKAT = ["Jan", "Feb", "Mar", "Apr", "Mei", "Jun", "Jul", "Agu", "Sep", "Okt", "Nov", "Des"]
HARI_SINGKAT = ["Sen", "Sel", "Rab", "Kam", "Jum", "Sab", "Min"]


def format_rupiah(n: float) -> str:
    """
    Format integer to Indonesian-style with '.' as thousands separator.
    Example: 1234567 -> "1.234.567"
    """
    return f"{n:,.0f}".replace(",", ".")


def format_price(n: float) -> str:
    return f"Rp {format_rupiah(n)}"


def format_short(n: float) -> str:
    """
    Compact amounts for chart axes.
    Example: 1500000 -> "1.5jt", 15000 -> "15rb"
    """
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}jt"
    if n >= 1_000:
        return f"{n / 1_000:.0f}rb"
    return f"{n:.0f}"


def format_tanggal(ts: datetime, tz: Optional[tzinfo] = None) -> str:
    """Example: 2024-03-05 -> "5 Mar 2024" """
    local = ts.astimezone(tz) if ts.tzinfo else ts
    return f"{local.day} {BULAN_SINGKAT[local.month - 1]} {local.year}"


def format_waktu(ts: datetime, tz: Optional[tzinfo] = None) -> str:
    local = ts.astimezone(tz) if ts.tzinfo else ts
    return f"{format_tanggal(local, tz)} {local:%H:%M}"


def format_hari(iso_date: str) -> str:
    """Example: "2024-03-05" -> "Sel 5" """
    d = datetime.fromisoformat(iso_date)
    return f"{HARI_SINGKAT[d.weekday()]} {d.day}"
