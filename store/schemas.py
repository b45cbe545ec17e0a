from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from envelope.cipher import DEFAULT_ALGORITHM, SUPPORTED_ALGORITHMS
from envelope.kdf import DEFAULT_DIGEST, DEFAULT_ITERATIONS, SUPPORTED_DIGESTS


Document = dict[str, Any]

TBaseSchema = TypeVar("TBaseSchema", bound="BaseSchema")


class BaseSchema(BaseModel):
    def to_json(self) -> str:
        return self.model_dump_json()

    def to_dict(self) -> dict[str, object]:
        return self.model_dump()

    @classmethod
    def from_json(cls: type[TBaseSchema], data: str) -> TBaseSchema:
        return cls.model_validate_json(data)

    @classmethod
    def from_dict(cls: type[TBaseSchema], data: Mapping[str, object]) -> TBaseSchema:
        return cls.model_validate(data)


class StoreConfig(BaseSchema):
    """Settings fixed at open time and applied to every write."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    password: str | None = Field(default=None, repr=False)
    iterations: int = Field(default=DEFAULT_ITERATIONS, gt=0)
    digest: str = DEFAULT_DIGEST
    algorithm: str = DEFAULT_ALGORITHM

    @field_validator("password")
    @classmethod
    def empty_password_is_none(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("digest")
    @classmethod
    def known_digest(cls, value: str) -> str:
        name = value.lower()
        if name not in SUPPORTED_DIGESTS:
            raise ValueError(f"digest must be one of {', '.join(SUPPORTED_DIGESTS)}")
        return name

    @field_validator("algorithm")
    @classmethod
    def known_algorithm(cls, value: str) -> str:
        name = value.lower()
        if name not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"algorithm must be one of {', '.join(SUPPORTED_ALGORITHMS)}")
        return name

    @property
    def encrypted(self) -> bool:
        return self.password is not None

    def with_password(self, password: str | None) -> "StoreConfig":
        """Return a copy of this config using *password*."""
        return type(self).from_dict({**self.model_dump(), "password": password})

    def describe(self) -> dict[str, object]:
        """Loggable view of the config; never includes the password."""
        return {
            "encrypted": self.encrypted,
            "iterations": self.iterations,
            "digest": self.digest,
            "algorithm": self.algorithm,
        }
