"""Schema and parse options.

Options are validated pydantic models so a typo (``abort_erly=True``) fails at
construction instead of being silently ignored.

Precedence for one parse call: settings -> schema options -> parse options.
"""
from __future__ import annotations

from typing import Any, Callable, Mapping, Union

from pydantic import BaseModel, ConfigDict

ErrorMapOption = Union[Callable[..., Any], Mapping[str, Union[str, Callable[..., Any]]]]


class Messages(BaseModel):
    """Explicit per-schema messages, keyed by issue kind."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    required: str | None = None
    invalid_type: str | None = None
    invalid_literal: str | None = None
    invalid_enum_value: str | None = None
    invalid_instance: str | None = None
    unrecognized_keys: str | None = None
    invalid_union: str | None = None
    invalid_discriminator: str | None = None
    invalid_intersection: str | None = None
    invalid_tuple: str | None = None
    forbidden: str | None = None
    invalid_arguments: str | None = None
    invalid_return_type: str | None = None


class ParseOptions(BaseModel):
    """Options accepted by ``parse`` and friends."""
    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    abort_early: bool | None = None
    debug: bool | None = None
    contextual_error_map: ErrorMapOption | None = None


class SchemaOptions(ParseOptions):
    """Options accepted by every schema factory."""

    schema_error_map: ErrorMapOption | None = None
    messages: Messages = Messages()

    def merge(self, **changes: Any) -> SchemaOptions:
        """New options with ``changes`` applied; ``messages`` are merged key-wise."""
        current = {name: getattr(self, name) for name in self.model_fields_set}
        if (messages := changes.pop("messages", None)) is not None:
            new = messages.model_dump(exclude_none=True) if isinstance(messages, Messages) else dict(messages)
            changes["messages"] = {**self.messages.model_dump(exclude_none=True), **new}
        return SchemaOptions.model_validate({**current, **changes})


DEFAULT_OPTIONS = SchemaOptions()


def make_options(options: SchemaOptions | None = None, **kwargs: Any) -> SchemaOptions:
    """Build options for a factory call, reusing the shared default when nothing is set."""
    if options is not None: return options.merge(**kwargs) if kwargs else options
    return SchemaOptions.model_validate(kwargs) if kwargs else DEFAULT_OPTIONS
