from datetime import datetime, timezone

from repairshop.services.numbering import next_document_number

NOW = datetime(2025, 3, 14, tzinfo=timezone.utc)


def test_first_number_of_workshop():
    assert next_document_number("OT", [], 4, now=NOW) == "OT-2503-0001"


def test_continues_after_highest_sequence():
    existing = ["OT-2502-0007", "OT-2503-0002", "OT-2501-0011"]
    assert next_document_number("OT", existing, 4, now=NOW) == "OT-2503-0012"


def test_invoice_width():
    assert next_document_number("FACT", ["FACT-2503-00041"], 5, now=NOW) == "FACT-2503-00042"


def test_ignores_malformed_numbers():
    assert next_document_number("OT", ["legacy", "OT-2503-abc"], 4, now=NOW) == "OT-2503-0001"
