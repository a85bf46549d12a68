from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for API payloads: snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def first_error_message(errors: list) -> str:
    """
    Human message for the first pydantic error.

    Custom validators raise ValueError("Title is required"), which pydantic
    reports as "Value error, Title is required".
    """
    if not errors:
        return "Validation failed"
    error = errors[0]
    if error.get("type") == "missing":
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = loc[-1] if loc else "Field"
        return f"{field} is required"
    message = str(error.get("msg", "Validation failed"))
    for prefix in ("Value error, ", "Assertion failed, "):
        if message.startswith(prefix):
            return message[len(prefix):]
    return message
