from services.order_parser import OrderItemLine, extract_item_lines, parse_item_line, parse_order_text
from services.sms_parser import format_amount, normalize_phone, parse_sms_text, phone_variants


ORDER_TEXT = """Name: John Doe
Address: 123 Main Street, Ward 5
Potato 2 SouthDelhi 6338398272 1
Tomato 1 CentralDelhi 6338398272 1"""


def test_parses_complete_order():
    parsed = parse_order_text(ORDER_TEXT)

    assert parsed is not None
    assert parsed.name == "John Doe"
    assert parsed.address == "123 Main Street, Ward 5"
    assert parsed.items == [
        OrderItemLine("Potato", 2, "SouthDelhi", "6338398272", 1),
        OrderItemLine("Tomato", 1, "CentralDelhi", "6338398272", 1),
    ]


def test_item_line_tokens():
    item = parse_item_line("Potato 2 SouthDelhi 6338398272 1")

    assert item.product == "Potato"
    assert item.quantity == 2
    assert item.district == "SouthDelhi"
    assert item.added_by == "6338398272"
    assert item.unique_number == 1


def test_item_line_ignores_extra_tokens():
    item = parse_item_line("Rice 3 Chennai 6338398272 2 extra words")
    assert item == OrderItemLine("Rice", 3, "Chennai", "6338398272", 2)


def test_short_lines_are_dropped():
    text = ORDER_TEXT + "\nOnion 4 SouthDelhi"
    parsed = parse_order_text(text)

    assert [item.product for item in parsed.items] == ["Potato", "Tomato"]


def test_non_numeric_quantity_is_not_an_item():
    assert parse_item_line("Potato two SouthDelhi 6338398272 1") is None
    assert parse_item_line("Potato 2 SouthDelhi 6338398272 first") is None
    assert parse_item_line("Potato 0 SouthDelhi 6338398272 1") is None


def test_too_few_lines_is_unparseable():
    assert parse_order_text("Name: John\nAddress: Somewhere") is None
    assert parse_order_text("") is None


def test_missing_or_duplicate_labels_is_unparseable():
    missing_name = "Address: Somewhere\nPotato 2 SouthDelhi 6338398272 1\nTomato 1 CentralDelhi 6338398272 1"
    duplicate_name = "Name: A\nName: B\nAddress: Somewhere\nPotato 2 SouthDelhi 6338398272 1"

    assert parse_order_text(missing_name) is None
    assert parse_order_text(duplicate_name) is None


def test_labels_are_case_sensitive():
    text = "name: John\naddress: Somewhere\nPotato 2 SouthDelhi 6338398272 1"
    assert parse_order_text(text) is None


def test_extract_skips_labels_even_when_long():
    extracted = extract_item_lines(ORDER_TEXT)

    assert len(extracted.items) == 2
    assert extracted.malformed_lines == []


def test_extract_reports_malformed_item_lines():
    extracted = extract_item_lines("Potato 2 SouthDelhi 6338398272 1\nTomato x CentralDelhi 6338398272 1")

    assert len(extracted.items) == 1
    assert extracted.malformed_lines == ["Tomato x CentralDelhi 6338398272 1"]


def test_parse_sms_amount_and_phone():
    notice = parse_sms_text("Rs.150 Credited to your account by 9876543210 via UPI")

    assert notice.amount == 150.0
    assert notice.phone == "9876543210"


def test_parse_sms_is_case_insensitive_with_decimals():
    notice = parse_sms_text("rs 249.50 credited BY 9123456780")

    assert notice.amount == 249.5
    assert notice.phone == "9123456780"


def test_parse_sms_failure():
    assert parse_sms_text("Your OTP is 123456") is None
    assert parse_sms_text("Rs.150 Credited to your account") is None


def test_phone_normalization():
    assert normalize_phone("+919876543210") == "9876543210"
    assert normalize_phone("9876543210") == "9876543210"
    assert normalize_phone(" +91 98765 43210 ") == "9876543210"
    assert phone_variants("+919876543210") == ["9876543210", "+919876543210"]


def test_format_amount():
    assert format_amount(150.0) == "150"
    assert format_amount(99.5) == "99.50"
