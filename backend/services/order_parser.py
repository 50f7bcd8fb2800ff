"""
Free-text order grammar.

    Name: <customer name>
    Address: <delivery address>
    <product> <quantity> <district> <addedBy> <uniqueNumber>
    ...

Labels are case-sensitive and must start the line. Item lines are split on
whitespace; only the first five tokens are used. Lines with fewer than five
tokens are ignored so a half-typed line does not block the rest of the form.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

NAME_LABEL = "Name:"
ADDRESS_LABEL = "Address:"
ITEM_TOKEN_COUNT = 5
MIN_ORDER_LINES = 3


class LineKind(str, Enum):
    NAME = "name"
    ADDRESS = "address"
    ITEM = "item"
    MALFORMED_ITEM = "malformed_item"
    IGNORED = "ignored"


@dataclass(frozen=True)
class OrderItemLine:
    product: str
    quantity: int
    district: str
    added_by: str
    unique_number: int


@dataclass
class ParsedOrder:
    name: str
    address: str
    items: List[OrderItemLine] = field(default_factory=list)


@dataclass
class ExtractedItems:
    items: List[OrderItemLine]
    malformed_lines: List[str]


def _to_int(token: str) -> Optional[int]:
    try:
        return int(token)
    except ValueError:
        return None


def parse_item_line(line: str) -> Optional[OrderItemLine]:
    """Tokenize one item line; None when it is short or its numbers are not usable"""
    parts = line.split()
    if len(parts) < ITEM_TOKEN_COUNT:
        return None

    product, quantity_token, district, added_by, unique_token = parts[:ITEM_TOKEN_COUNT]
    quantity = _to_int(quantity_token)
    unique_number = _to_int(unique_token)
    if quantity is None or unique_number is None or quantity < 1:
        return None

    return OrderItemLine(
        product=product,
        quantity=quantity,
        district=district,
        added_by=added_by,
        unique_number=unique_number,
    )


def classify_line(line: str) -> Tuple[LineKind, Optional[OrderItemLine]]:
    stripped = line.strip()
    if not stripped:
        return LineKind.IGNORED, None
    if stripped.startswith(NAME_LABEL):
        return LineKind.NAME, None
    if stripped.startswith(ADDRESS_LABEL):
        return LineKind.ADDRESS, None

    if len(stripped.split()) < ITEM_TOKEN_COUNT:
        return LineKind.IGNORED, None

    item = parse_item_line(stripped)
    if item is None:
        return LineKind.MALFORMED_ITEM, None
    return LineKind.ITEM, item


def _label_value(line: str, label: str) -> str:
    return line.strip()[len(label):].strip()


def parse_order_text(order_text: str) -> Optional[ParsedOrder]:
    """
    Parse a complete order form.

    Returns None (never raises) when the text has fewer than three non-empty
    lines or lacks exactly one Name: line and exactly one Address: line.
    Malformed item lines are dropped like short ones.
    """
    if not order_text:
        return None

    lines = [line for line in order_text.strip().splitlines() if line.strip()]
    if len(lines) < MIN_ORDER_LINES:
        return None

    names: List[str] = []
    addresses: List[str] = []
    items: List[OrderItemLine] = []

    for line in lines:
        kind, item = classify_line(line)
        if kind == LineKind.NAME:
            names.append(_label_value(line, NAME_LABEL))
        elif kind == LineKind.ADDRESS:
            addresses.append(_label_value(line, ADDRESS_LABEL))
        elif kind == LineKind.ITEM:
            items.append(item)

    if len(names) != 1 or len(addresses) != 1:
        return None

    return ParsedOrder(name=names[0], address=addresses[0], items=items)


def extract_item_lines(order_text: str) -> ExtractedItems:
    """
    Item lines for order intake. Labels are skipped and not required here;
    lines that have five tokens but unusable numbers are reported back so
    intake can reject them instead of silently shrinking the order.
    """
    items: List[OrderItemLine] = []
    malformed: List[str] = []

    for line in (order_text or "").splitlines():
        kind, item = classify_line(line)
        if kind == LineKind.ITEM:
            items.append(item)
        elif kind == LineKind.MALFORMED_ITEM:
            malformed.append(line.strip())

    return ExtractedItems(items=items, malformed_lines=malformed)
