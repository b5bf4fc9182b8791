import dataclasses
import functools
from typing import Any

import pydantic


def is_namedtuple_type(t: type) -> bool:
    return isinstance(t, type) and issubclass(t, tuple) and hasattr(t, "_fields")


def is_pydantic_model(t: Any) -> bool:
    """Check if a type is a Pydantic model."""
    if not isinstance(t, type):
        return False
    try:
        return issubclass(t, pydantic.BaseModel)
    except TypeError:
        return False


def is_record_type(t: Any) -> bool:
    """
    Fixed-schema record types: dataclasses, NamedTuples and Pydantic models.
    Their set of fields is declared by the type, not by the instance.
    """
    return isinstance(t, type) and (
        dataclasses.is_dataclass(t) or is_namedtuple_type(t) or is_pydantic_model(t)
    )


@functools.cache
def record_field_names(record_type: type) -> frozenset[str]:
    if dataclasses.is_dataclass(record_type):
        return frozenset(f.name for f in dataclasses.fields(record_type))
    elif is_namedtuple_type(record_type):
        return frozenset(getattr(record_type, "_fields", ()))
    elif is_pydantic_model(record_type):
        return frozenset(getattr(record_type, "model_fields", {}).keys())
    else:
        raise ValueError(f"Unsupported record type: {record_type}")


def replace_record_field(record: Any, name: str, value: Any) -> Any:
    """
    Return a copy of a fixed-schema *record* with field *name* set to *value*,
    using the record type's own copy-with-changes operation.
    """
    record_type = type(record)
    if dataclasses.is_dataclass(record_type):
        return dataclasses.replace(record, **{name: value})
    elif is_namedtuple_type(record_type):
        return record._replace(**{name: value})
    elif is_pydantic_model(record_type):
        return record.model_copy(update={name: value})
    else:
        raise ValueError(f"Unsupported record type: {record_type}")
