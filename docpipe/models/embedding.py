"""Per-request embedding configuration.

:class:`EmbeddingConfig` is built once per process call and is never
persisted.  Strategy and provider names are closed enums; unrecognised names
fall back to the default member via ``Enum._missing_`` so callers never have
to special-case free-form strings.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from docpipe.utils.errors import InvalidConfigError

MIN_CHUNK_SIZE = 100
MAX_CHUNK_SIZE = 2000
MAX_OVERLAP = 500


class ChunkingStrategy(str, Enum):  # noqa: UP042
    """How the chunker picks chunk boundaries."""

    CHARACTERS = "characters"
    PARAGRAPHS = "paragraphs"
    SECTIONS = "sections"

    @classmethod
    def _missing_(cls, value: object) -> ChunkingStrategy:
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().lower():
                    return member
        return cls.CHARACTERS


class EmbeddingModel(str, Enum):  # noqa: UP042
    """Embedding provider selector.

    ``OPENAI`` is the primary provider; ``HUGGINGFACE`` is reserved and
    raises :class:`~docpipe.utils.errors.ProviderNotImplementedError`.
    """

    OPENAI = "openai"
    HUGGINGFACE = "huggingface"

    @classmethod
    def _missing_(cls, value: object) -> EmbeddingModel:
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().lower():
                    return member
        return cls.OPENAI


class EmbeddingConfig(BaseModel):
    """Chunking and embedding parameters for a single process call."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    chunk_size: int = Field(default=500, ge=MIN_CHUNK_SIZE, le=MAX_CHUNK_SIZE)
    overlap: int = Field(default=50, ge=0, le=MAX_OVERLAP)
    chunking_strategy: ChunkingStrategy = ChunkingStrategy.CHARACTERS
    embedding_model: EmbeddingModel = EmbeddingModel.OPENAI
    metadata: dict[str, Any] = Field(default_factory=dict)
    provider_api_key: str | None = Field(default=None, repr=False)

    @model_validator(mode="before")
    @classmethod
    def _coerce_names(cls, data: Any) -> Any:
        # Unknown names must reach the enum's _missing_ fallback rather than
        # failing validation, so coerce them here before field validation.
        if isinstance(data, dict):
            data = dict(data)
            for key, alias, enum_cls in (
                ("chunking_strategy", "chunkingStrategy", ChunkingStrategy),
                ("embedding_model", "embeddingModel", EmbeddingModel),
            ):
                for name in (key, alias):
                    if isinstance(data.get(name), str):
                        data[name] = enum_cls(data[name])
            if data.get("metadata") is None:
                data.pop("metadata", None)
        return data

    @model_validator(mode="after")
    def _check_overlap(self) -> EmbeddingConfig:
        if self.overlap >= self.chunk_size:
            raise ValueError(
                f"overlap ({self.overlap}) must be smaller than chunkSize ({self.chunk_size})"
            )
        return self

    @classmethod
    def from_payload(
        cls,
        payload: dict[str, Any] | None,
        defaults: dict[str, Any] | None = None,
    ) -> EmbeddingConfig:
        """Build a config from a wire payload, filling gaps from *defaults*.

        *defaults* uses the ``chunking`` section keys of ``config.yaml``
        (``chunk_size``, ``overlap``, ``strategy``, ``embedding_model``).

        Raises
        ------
        InvalidConfigError
            If any bound is violated.
        """
        data: dict[str, Any] = {}
        if defaults:
            for key, target in (
                ("chunk_size", "chunk_size"),
                ("overlap", "overlap"),
                ("strategy", "chunking_strategy"),
                ("embedding_model", "embedding_model"),
            ):
                if key in defaults:
                    data[target] = defaults[key]
        for key, value in (payload or {}).items():
            if value is None:
                continue
            # Payload keys may be camelCase; drop any default stored under the snake_case name.
            data.pop(_to_snake(key), None)
            data[key] = value

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in exc.errors()
            )
            raise InvalidConfigError(message=f"Invalid embedding config: {details}") from exc


def _to_snake(name: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in name)
