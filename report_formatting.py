from decimal import Decimal, ROUND_HALF_UP


def fmt_fixed(x, places=2):
    """Fixed-point string, rounding half away from zero (2.25 -> '2.3' at 1 place)."""
    try:
        value = Decimal(float(x))
    except (TypeError, ValueError):
        return "N/A"
    if not value.is_finite():
        return "N/A"
    text = f"{value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP):f}"
    if text.startswith("-") and not text.strip("-0."):
        text = text[1:]
    return text


def fmt_signed(x, places=2):
    """Like fmt_fixed, with an explicit '+' on non-negative values."""
    text = fmt_fixed(x, places)
    if text == "N/A" or text.startswith("-"):
        return text
    return f"+{text}"


def fmt_pct_clean(x, places=1):
    text = fmt_fixed(x, places)
    return text if text == "N/A" else f"{text}%"


def fmt_delta_pct(x, places=1):
    text = fmt_signed(x, places)
    return f"{text}%" if text != "N/A" else "N/A"


def fmt_score(x):
    return fmt_fixed(x, 2)
