"""
Tests for edit batch validation.
"""

import pytest

from page_text_backend.core.text_fields import TextEdit
from page_text_backend.exceptions import EditBatchValidationError
from page_text_backend.services.edit_validation import parse_edit_batch


class TestParseEditBatch:
    """Tests for turning JSON payloads into edits."""

    def test_object_payload(self):
        edits = parse_edit_batch({"edits": [{"id": "text:4", "oldValue": "Hi", "newValue": "Hello"}]})
        assert edits == [TextEdit("text:4", "Hi", "Hello")]

    def test_list_payload(self):
        edits = parse_edit_batch([
            {"id": "text:4", "oldValue": "Hi", "newValue": "Hello"},
            {"id": "attr:10:alt", "oldValue": "", "newValue": "Cat"},
        ])
        assert [e.id for e in edits] == ["text:4", "attr:10:alt"]
        assert edits[1].is_insertion

    def test_legacy_value_key(self):
        edits = parse_edit_batch([{"id": "text:4", "oldValue": "Hi", "value": "Hey"}])
        assert edits[0].new_value == "Hey"

    def test_missing_old_value(self):
        with pytest.raises(EditBatchValidationError) as exc_info:
            parse_edit_batch([{"id": "text:4", "newValue": "Hello"}])
        assert any("oldValue" in message for message in exc_info.value.validation_errors)

    def test_missing_new_value(self):
        with pytest.raises(EditBatchValidationError):
            parse_edit_batch([{"id": "text:4", "oldValue": "Hi"}])

    def test_wrong_value_type(self):
        with pytest.raises(EditBatchValidationError) as exc_info:
            parse_edit_batch([{"id": "text:4", "oldValue": "Hi", "newValue": 5}])
        assert "edits.0.newValue" in str(exc_info.value)

    def test_empty_batch(self):
        with pytest.raises(EditBatchValidationError):
            parse_edit_batch([])

    def test_not_an_edit_batch(self):
        with pytest.raises(EditBatchValidationError):
            parse_edit_batch("text:4")
