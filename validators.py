"""
Input validation schemas using Marshmallow for API endpoints and uploaded rows.
"""
from marshmallow import EXCLUDE, Schema, fields, validate, pre_load, ValidationError

from patterns.models import ValueType


class BaseSchema(Schema):
    """Ignores unknown fields; trims strings and treats blank values as missing."""
    class Meta:
        unknown = EXCLUDE

    @pre_load
    def strip_values(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        data = {k: v.strip() if isinstance(v, str) else v for k, v in data.items()}
        return {k: v for k, v in data.items() if v not in ("", None)}


class CustomerRowSchema(BaseSchema):
    """Validation schema for one customer list row (canonical column names)."""
    account_number = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=64),
        error_messages={'required': 'Missing account number'}
    )
    email = fields.Email(
        required=True,
        error_messages={
            'required': 'Missing email address',
            'invalid': 'Invalid email format'
        }
    )
    customer_name = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=200),
        error_messages={'required': 'Missing customer name'}
    )


class DetectRequestSchema(BaseSchema):
    """Validation schema for pattern detection on raw text."""
    text = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=2_000_000),
        error_messages={'required': 'Text field is required'}
    )
    value_type = fields.Str(
        required=False,
        allow_none=True,
        validate=validate.OneOf([t.value for t in ValueType]),
        load_default=None
    )


class GeneratePatternSchema(BaseSchema):
    """Validation schema for regex synthesis requests."""
    examples = fields.List(
        fields.Str(validate=validate.Length(min=1, max=200)),
        required=True,
        validate=validate.Length(min=1, max=50),
        error_messages={'required': 'Provide at least one example'}
    )
    value_type = fields.Str(
        required=False,
        validate=validate.Length(min=1, max=50),
        load_default='account'
    )


class PatternTestSchema(BaseSchema):
    """Validation schema for pattern tester requests."""
    pattern = fields.Str(
        required=False,
        validate=validate.Length(min=1, max=1000),
        load_default=None
    )
    text = fields.Str(
        required=True,
        validate=validate.Length(min=1),
        error_messages={'required': 'Text field is required'}
    )
    use_library = fields.Bool(required=False, load_default=False)


class PatternLibrarySchema(BaseSchema):
    """Validation schema for replacing the saved pattern library."""
    account_patterns = fields.List(fields.Str(validate=validate.Length(min=1, max=1000)), load_default=list)
    name_patterns = fields.List(fields.Str(validate=validate.Length(min=1, max=1000)), load_default=list)


class PromotePatternsSchema(BaseSchema):
    """Validation schema for saving discovered patterns into the library."""
    patterns = fields.List(fields.Dict(), required=True)
    selected = fields.List(fields.Int(validate=validate.Range(min=0)), required=True)


class SplitRequestSchema(BaseSchema):
    """Validation schema for statement splitting form fields."""
    month_year = fields.Str(
        required=False,
        validate=validate.Length(max=50),
        load_default=''
    )


class SendRequestSchema(BaseSchema):
    """Validation schema for statement email sending form fields."""
    template = fields.Str(required=False, validate=validate.Length(max=20000), load_default=None)
    test_email = fields.Email(required=False, load_default=None)


def format_errors(err: ValidationError) -> str:
    """Flatten marshmallow messages into one line."""
    messages = err.messages if isinstance(err.messages, dict) else {'_schema': err.messages}
    parts = []
    for field, msgs in messages.items():
        if isinstance(msgs, dict):
            msgs = [str(m) for m in msgs.values()]
        text = "; ".join(str(m) for m in msgs) if isinstance(msgs, list) else str(msgs)
        parts.append(text if field == '_schema' else f"{field}: {text}")
    return ", ".join(parts)
