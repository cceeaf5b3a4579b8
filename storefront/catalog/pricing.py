"""Helpers for the display-string prices stored on products."""

RUPEE = "₹"


def parse_price(text: str | None) -> float:
    """
    Parse a numeric price out of a display string.

    Keeps only digits and dots, so "₹370", "Rs. 1,234" and "$12.50" all parse.
    Returns 0.0 when nothing numeric is left.
    """
    if not text:
        return 0.0
    cleaned = "".join(c for c in text if c.isdigit() or c == ".")
    # "Rs. 1,234" leaves a leading dot from the abbreviation
    cleaned = cleaned.strip(".")
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def discount_pct(price: str | None, original_price: str | None) -> int:
    """Whole-percent discount of ``price`` against ``original_price``; 0 when not discounted."""
    p = parse_price(price)
    o = parse_price(original_price)
    if o <= 0 or p <= 0 or o <= p:
        return 0
    return int((o - p) / o * 100)


def fmt_price(price: str | None) -> str:
    """Prefix a bare amount with the rupee sign."""
    if not price:
        return ""
    p = price.strip()
    if p.startswith(RUPEE) or p.startswith("Rs"):
        return p
    return RUPEE + p


def rupees(amount: int) -> str:
    return f"{RUPEE}{amount}"
