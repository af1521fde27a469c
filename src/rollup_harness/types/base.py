"""Reusable base models for wire payloads and harness values."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """
    An immutable model for JSON-RPC payloads.

    Nodes add fields between releases, so unknown keys are ignored rather
    than rejected. Field names are matched verbatim.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )


class CamelModel(WireModel):
    """
    A wire model whose fields are camel case on the wire.

    For example, the field name `parent_hash` in a Python model is read from
    and written to JSON as `parentHash`, which is how execution clients name it.
    """

    model_config = WireModel.model_config | {"alias_generator": to_camel}


class StrictBaseModel(BaseModel):
    """A strict, immutable pydantic base model for locally authored configuration."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )
