"""Tests for field clearing helpers."""

from syncstate import clear_fields, clear_fields_when, keep_fields_when


class TestClearingHelpers:
    """Helpers return new dicts and never touch their input"""

    def setup_method(self):
        self.state = {"kind": "personal", "company": "ACME", "vat": "NL123", "name": "Ada"}

    def test_clear_fields_when(self):
        result = clear_fields_when(self.state, {"company": True, "vat": False})

        assert result["company"] is None
        assert result["vat"] == "NL123"
        assert self.state["company"] == "ACME"

    def test_clear_fields(self):
        result = clear_fields(self.state, ["company", "vat"])

        assert result == {"kind": "personal", "company": None, "vat": None, "name": "Ada"}

    def test_keep_fields_when(self):
        result = keep_fields_when(self.state, {"name": True, "company": False, "missing": True})

        assert result == {"name": "Ada"}
