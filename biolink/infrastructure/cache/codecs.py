"""
Value Codecs

A revalidating cache backed by Redis stores JSON payloads, so cached
records are converted with a codec on the way in and out. The in-process
store keeps values by reference and uses IdentityCodec.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


class IdentityCodec:
    """Stores values unchanged."""

    def encode(self, value: Any) -> Any:
        return value

    def decode(self, payload: Any) -> Any:
        return payload


class ModelCodec(Generic[ModelT]):
    """
    Converts a pydantic model to a JSON-compatible dict and back.

    Usage:
        codec = ModelCodec(Profile)
        payload = codec.encode(profile)   # dict, safe for orjson
        profile = codec.decode(payload)
    """

    def __init__(self, model: type[ModelT]):
        self.model = model

    def encode(self, value: ModelT) -> dict[str, Any]:
        return value.model_dump(mode="json")

    def decode(self, payload: dict[str, Any]) -> ModelT:
        return self.model.model_validate(payload)
