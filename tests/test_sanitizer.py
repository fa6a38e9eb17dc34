"""Tests for provider response sanitizing."""

from decimal import Decimal

import pytest

from showtrack.receipts.errors import ResponseParseFailed, StepFailed
from showtrack.receipts.sanitizer import parse_json_payload, sanitize


class TestSanitize:
    def test_plain_json_unchanged(self):
        assert sanitize('{"a":1}') == '{"a":1}'

    def test_strips_json_fence(self):
        assert sanitize('```json\n{"a":1}\n```') == '{"a":1}'

    def test_strips_bare_fence_and_backticks(self):
        assert sanitize('```\n[1, 2]\n```') == "[1, 2]"
        assert sanitize('`{"a":1}`') == '{"a":1}'

    def test_strips_narrative_prefix(self):
        raw = 'Here is the JSON: {"vendor": "Rural King"}'
        assert sanitize(raw) == '{"vendor": "Rural King"}'

    def test_strips_prefix_ending_at_newline(self):
        raw = 'The following items were found\n[{"description": "HAY"}]'
        assert sanitize(raw) == '[{"description": "HAY"}]'

    def test_drops_trailing_commentary(self):
        raw = '{"a": [1, 2]} Let me know if you need anything else.'
        assert sanitize(raw) == '{"a": [1, 2]}'

    def test_brackets_inside_strings_ignored(self):
        raw = '{"d": "a } b ] c", "e": "\\"}"} tail'
        assert sanitize(raw) == '{"d": "a } b ] c", "e": "\\"}"}'

    def test_first_bracket_wins(self):
        assert sanitize('Sure! [{"x": 1}] and {"y": 2}') == '[{"x": 1}]'

    def test_nested_objects(self):
        raw = 'x {"a": {"b": {"c": 1}}, "d": 2} y'
        assert sanitize(raw) == '{"a": {"b": {"c": 1}}, "d": 2}'

    def test_unbalanced_returns_trimmed_text(self):
        assert sanitize('  {"a": 1  ') == '{"a": 1'

    def test_no_json_returns_trimmed_text(self):
        assert sanitize("  nothing to see  ") == "nothing to see"

    def test_never_raises_on_non_string(self):
        assert sanitize(None) == ""
        assert sanitize(42) == ""


class TestParseJsonPayload:
    def test_floats_become_decimal(self):
        payload = parse_json_payload('```json\n{"totalAmount": 81.98}\n```', dict)
        assert payload["totalAmount"] == Decimal("81.98")
        assert isinstance(payload["totalAmount"], Decimal)

    def test_list_payload(self):
        payload = parse_json_payload('Here is the list: [{"amount": 5.29}]', list)
        assert payload == [{"amount": Decimal("5.29")}]

    def test_invalid_json_raises(self):
        with pytest.raises(ResponseParseFailed, match="invalid JSON"):
            parse_json_payload("I could not read this receipt.", dict)

    def test_wrong_top_level_type_raises(self):
        with pytest.raises(ResponseParseFailed, match="expected JSON list"):
            parse_json_payload('{"a": 1}', list)

    def test_parse_failure_is_a_step_failure(self):
        with pytest.raises(StepFailed):
            parse_json_payload("{", dict)
