from flask import abort
from marshmallow import ValidationError


def validate_or_abort(schema, payload):
    """Load ``payload`` through ``schema``; abort with 400 and field errors if it does not fit."""
    try:
        return schema.load(payload)
    except ValidationError as err:
        abort(
            400,
            description={
                "code": "VALIDATION_ERROR",
                "message": "Validation error",
                "errors": err.messages,
            },
        )
