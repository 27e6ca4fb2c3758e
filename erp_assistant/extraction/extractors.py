"""
Field Extractors

Pure functions that pull accounting fields out of a normalized message.

DESIGN DECISION: Each field is extracted by an ORDERED list of small named
matchers; the first matcher that returns a value wins. Pattern priority is
part of the behavior ("10 units" beats "units: 10" beats "sold 10 chairs"),
so the order of every matcher list below is significant.

CRITICAL: Extractors never raise. An absent or unparseable field is None
(or the documented default). Only the requirement validator turns absence
into a question.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Sequence, TypeVar


T = TypeVar("T")
Matcher = Callable[[str], Optional[T]]

NUMBER = r"(\d+(?:\.\d+)?)"
UNIT_WORDS = r"(?:units?|pieces?|pcs|pc|items?|qty|quantity)"
CURRENCY_WORDS = r"(?:pkr|rs|inr|rupees)"
LAC_WORDS = r"(?:lacs?|lakhs?)"
LAC = Decimal("100000")

MONTHS = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)
MONTH_PATTERN = r"(?:" + "|".join(MONTHS) + r")"

# Words that end a party name ("to acme AT 100", "from acme SKU x1")
_PARTY_STOP = (
    r"(?=\s+(?:sku|at|as|on|and|per|for|from|to|with|in|by|of|cash|credit|bank"
    r"|monthly|advance|salary|payment)\b|\s*[@\d,.;:!?()]|$)"
)
_PARTY_NOISE = re.compile(
    r"\b(?:sold|sell|sale|customer|invoice|purchased?|buy|bought|stock"
    r"|inventory|supplier|vendor)\b"
)

_PRODUCT_CUT = re.compile(
    r"(?:^|\s+)(?:at|per|from|to|for|supplier|vendor|customer|sku|on cash|on credit)\b|\s*@"
)
_SKU = re.compile(r"\bsku\s*(?:is\b|=|:)?\s*([a-z0-9][a-z0-9\-]*)", re.IGNORECASE)
_PO_NUMBER = re.compile(r"\bpo[-\s]?(\d{4})-(\d{3,4})\b", re.IGNORECASE)


def normalize_text(text: Optional[str]) -> str:
    """Lower-case, drop thousands separators and collapse whitespace."""
    if not text:
        return ""
    lowered = text.strip().lower()
    lowered = re.sub(r"(?<=\d),(?=\d{3}\b)", "", lowered)
    return re.sub(r"\s+", " ", lowered)


def to_decimal(value: object) -> Optional[Decimal]:
    """Parse a number leniently; anything unparseable is None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip().replace(",", ""))
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def title_case(text: str) -> str:
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), text)


def first_match(text: str, matchers: Sequence[Matcher]) -> Optional[T]:
    """Run matchers in priority order and return the first hit."""
    for matcher in matchers:
        value = matcher(text)
        if value is not None:
            return value
    return None


# =============================================================================
# QUANTITY
# =============================================================================

def match_quantity_forward(text: str) -> Optional[Decimal]:
    """`10 units`, `5 pcs`"""
    m = re.search(rf"\b{NUMBER}\s*{UNIT_WORDS}\b", text)
    return to_decimal(m.group(1)) if m else None


def match_quantity_reverse(text: str) -> Optional[Decimal]:
    """`units are 10`, `qty: 5`"""
    m = re.search(rf"\b{UNIT_WORDS}\s*(?:is|are|was|were|:)?\s*{NUMBER}", text)
    return to_decimal(m.group(1)) if m else None


def match_quantity_after_verb(text: str) -> Optional[Decimal]:
    """`sold 10 widgets`, `bought 3 chairs` (a count right after the verb)."""
    m = re.search(
        rf"\b(?:sold|sell|sale of|bought|buy|purchased|purchase|order(?:ed)?)"
        rf"[:\-]?\s+(?:for\s+)?{NUMBER}\s+(?!{CURRENCY_WORDS}\b|{LAC_WORDS}\b|worth\b)[a-z]",
        text,
    )
    return to_decimal(m.group(1)) if m else None


QUANTITY_MATCHERS: tuple[Matcher, ...] = (
    match_quantity_forward,
    match_quantity_reverse,
    match_quantity_after_verb,
)


def match_quantity(text: str) -> Optional[Decimal]:
    """Explicit quantity, or None when the message states none."""
    return first_match(text, QUANTITY_MATCHERS)


def extract_quantity(text: str) -> Decimal:
    quantity = match_quantity(text)
    return quantity if quantity is not None else Decimal("1")


# =============================================================================
# PRICES AND AMOUNTS
# =============================================================================

def match_price_at(text: str) -> Optional[Decimal]:
    """`at 100`, `@ 99.5`, `at rs 100`"""
    m = re.search(rf"(?:\bat\b|@)\s*(?:{CURRENCY_WORDS}\.?\s*)?{NUMBER}", text)
    return to_decimal(m.group(1)) if m else None


def match_price_currency(text: str) -> Optional[Decimal]:
    """`100 pkr`, `250 rupees`"""
    m = re.search(rf"\b{NUMBER}\s*{CURRENCY_WORDS}\b", text)
    return to_decimal(m.group(1)) if m else None


def match_price_per_unit(text: str) -> Optional[Decimal]:
    """`50 per unit`, `20 per kg`"""
    m = re.search(rf"\b{NUMBER}\s*per\s*(?:units?|pieces?|pcs?|kg|items?)\b", text)
    return to_decimal(m.group(1)) if m else None


UNIT_PRICE_MATCHERS: tuple[Matcher, ...] = (
    match_price_at,
    match_price_currency,
    match_price_per_unit,
)


def extract_unit_price(text: str) -> Optional[Decimal]:
    return first_match(text, UNIT_PRICE_MATCHERS)


def match_bare_amount(text: str) -> Optional[Decimal]:
    """First number in the text; a `lac` suffix multiplies by 100,000."""
    m = re.search(rf"\b{NUMBER}(\s*{LAC_WORDS})?\b", text)
    if not m:
        return None
    amount = to_decimal(m.group(1))
    if amount is not None and m.group(2):
        amount *= LAC
    return amount


def extract_amount(
    text: str,
    quantity: Optional[Decimal] = None,
    unit_price: Optional[Decimal] = None,
) -> Optional[Decimal]:
    """quantity x unit price when both were stated, else the bare amount."""
    if quantity is not None and unit_price is not None:
        return quantity * unit_price
    return match_bare_amount(text)


# =============================================================================
# NAMES AND CODES
# =============================================================================

def match_party_after(text: str, trigger: str) -> Optional[str]:
    """Name following one trigger word, cleaned and title-cased."""
    pattern = rf"\b{trigger}(?:\s+is\s+|\s*:\s*|\s+)([a-z][a-z\s]*?){_PARTY_STOP}"
    for m in re.finditer(pattern, text):
        name = _PARTY_NOISE.sub(" ", m.group(1))
        name = re.sub(r"\s+", " ", name).strip()
        if len(name) >= 2:
            return title_case(name)
    return None


def extract_party_name(text: str, triggers: Sequence[str]) -> Optional[str]:
    """First acceptable name after any trigger, tried in trigger order."""
    return first_match(
        text, [lambda t, trigger=trigger: match_party_after(t, trigger) for trigger in triggers]
    )


def extract_sku(text: str) -> Optional[str]:
    """`sku ABC-1`, `sku: x9`, `sku is w-100` (case preserved from the input)."""
    m = _SKU.search(text or "")
    return m.group(1).strip() if m else None


def extract_product_name(
    text: str,
    triggers: Sequence[str],
    fallback: str,
    exclude: Sequence[str] = (),
) -> str:
    """
    Text between the earliest trigger phrase and the first cut token.

    Quantity/unit tokens, SKU tokens, excluded words (e.g. the party name)
    and punctuation are removed. Two characters or fewer means no usable
    name was given and the fallback label is returned.
    """
    start = None
    for trigger in triggers:
        m = re.search(trigger, text)
        if m and (start is None or m.start() < start[0]):
            start = (m.start(), m.end())
    after = text[start[1]:] if start else text
    after = re.sub(r"^[^\w]+", "", after.strip())
    after = re.sub(r"^(?:of|for)\s+", "", after)

    cut = _PRODUCT_CUT.search(after)
    raw = after[:cut.start()] if cut else after

    cleaned = re.sub(rf"\b\d+(?:\.\d+)?\s*{UNIT_WORDS}\b(?:\s+of\b)?", " ", raw)
    cleaned = re.sub(r"^\s*\d+(?:\.\d+)?\s+", "", cleaned)
    cleaned = re.sub(r"\bsku\s*(?:is\b|=|:)?\s*[a-z0-9\-]+", " ", cleaned)
    for word in exclude:
        if word:
            cleaned = re.sub(rf"\b{re.escape(word.lower())}\b", " ", cleaned)
    cleaned = re.sub(r"[^\w\s]", "", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()

    return title_case(cleaned) if len(cleaned) > 2 else fallback


def extract_po_number(text: str) -> Optional[str]:
    """`po-2025-0001`, `PO 2025-001` -> `PO-2025-0001`"""
    m = _PO_NUMBER.search(text or "")
    return f"PO-{m.group(1)}-{m.group(2)}" if m else None


# =============================================================================
# PAYMENT TERMS AND PERIODS
# =============================================================================

def extract_payment_method(text: str, default: Optional[str] = "Credit") -> Optional[str]:
    """Cash or Credit for sales and purchases."""
    if re.search(r"\bcash\b|\bpaid\b", text):
        return "Cash"
    if re.search(r"\bcredit\b", text):
        return "Credit"
    return default


def extract_settlement_method(text: str) -> Optional[str]:
    """How money moved for payments and salaries; None when unstated."""
    if re.search(r"\bcash\b", text):
        return "Cash"
    if re.search(r"\b(?:bank|cheque|check|transfer|online)\b", text):
        return "Bank"
    if re.search(r"\bcredit\b", text):
        return "Credit"
    return None


def classify_payment_answer(answer: str) -> str:
    """Map a free-text follow-up answer to Cash / Credit, else keep it as typed."""
    lowered = answer.lower()
    if "cash" in lowered:
        return "Cash"
    if "credit" in lowered:
        return "Credit"
    return answer


def extract_month(text: str) -> Optional[str]:
    m = re.search(rf"\b({MONTH_PATTERN})\b", text)
    return m.group(1).capitalize() if m else None


def extract_year(text: str) -> Optional[str]:
    m = re.search(r"\b((?:19|20)\d{2})\b", text)
    return m.group(1) if m else None


def extract_period(text: str) -> Optional[str]:
    """`January 2025`, or just the month when no year is given."""
    month = extract_month(text)
    if not month:
        return None
    m = re.search(rf"\b{month.lower()}\s*,?\s*((?:19|20)\d{{2}})\b", text)
    return f"{month} {m.group(1)}" if m else month


def strip_period(text: str) -> str:
    """Remove `month [year]` phrases so their digits are not read as amounts."""
    return re.sub(rf"\b{MONTH_PATTERN}\b(?:\s*,?\s*(?:19|20)\d{{2}}\b)?", " ", text)


def extract_salary_type(text: str) -> Optional[str]:
    if re.search(r"\badvance\b", text):
        return "Advance"
    if re.search(r"\bmonth(?:ly)?\b", text):
        return "Monthly"
    return None
