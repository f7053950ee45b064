from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for JSON payloads that use camelCase keys on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def first_error(exc: ValidationError, field_messages: dict, default: str,
                type_messages: dict = None) -> str:
    """Map the first validation error onto a stable, user-facing message"""
    errors = exc.errors()
    if not errors:
        return default
    error = errors[0]
    if error.get('type') == 'value_error':
        return str(error.get('msg', default)).removeprefix('Value error, ')
    if error.get('type') == 'missing':
        return default
    if type_messages and error.get('type') in type_messages:
        return type_messages[error['type']]
    loc = [part for part in error.get('loc', ()) if isinstance(part, str)]
    for part in reversed(loc):
        if part in field_messages:
            return field_messages[part]
    return default
