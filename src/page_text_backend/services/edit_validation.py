"""
Validation of edit batches submitted from outside the process.

Edit batches arrive as JSON (request bodies, files passed to the CLI). They
are checked against a JSON schema before any edit reaches the patch applier,
so a malformed request fails as a whole instead of being silently dropped
edit by edit.
"""

import logging
from typing import Any, Dict, List

import jsonschema

from ..core.text_fields import TextEdit
from ..exceptions.page_text_exceptions import EditBatchValidationError

logger = logging.getLogger(__name__)

EDIT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "oldValue": {"type": "string"},
        "newValue": {"type": "string"},
        "value": {"type": "string"},
    },
    "required": ["id", "oldValue"],
    "anyOf": [
        {"required": ["newValue"]},
        {"required": ["value"]},
    ],
}

EDIT_BATCH_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "edits": {
            "type": "array",
            "minItems": 1,
            "items": EDIT_SCHEMA,
        },
    },
    "required": ["edits"],
}


def parse_edit_batch(payload: Any) -> List[TextEdit]:
    """
    Validate an edit batch payload and convert it to TextEdit objects.

    Accepts either ``{"edits": [...]}`` or a bare list of edits.

    Raises:
        EditBatchValidationError: If the payload does not match the schema
    """
    if isinstance(payload, list):
        payload = {"edits": payload}

    validator = jsonschema.Draft7Validator(EDIT_BATCH_SCHEMA)
    errors = sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path])
    if errors:
        messages = []
        for error in errors:
            location = ".".join(str(p) for p in error.absolute_path)
            messages.append(f"{location}: {error.message}" if location else error.message)
        logger.warning(f"Rejected edit batch with {len(errors)} validation errors")
        raise EditBatchValidationError("Invalid edit batch", messages)

    return [TextEdit.from_dict(edit) for edit in payload["edits"]]
