"""Custom exception hierarchy for docpipe.

All application exceptions inherit from :class:`DocPipeError`, which carries a
stable machine-readable ``code`` plus an optional ``provider_name`` so error
handlers can identify which external service (e.g. "openai", "pinecone")
caused the failure.

The hierarchy is organized by pipeline stage:

    DocPipeError  (base -- catch-all for any docpipe error)
    +-- UnsupportedFormatError      (upload: extension / content-type rejected)
    +-- ExtractionFailedError       (upload: file could not be converted to text)
    +-- FileTooLargeError           (upload: size ceiling exceeded)
    +-- EmptyInputError             (chunking: nothing to split)
    +-- InvalidConfigError          (process: embedding config out of bounds)
    +-- NoInputError                (embedding: no chunks given)
    +-- MissingCredentialsError     (embedding: provider API key absent)
    +-- ProviderError               (embedding: provider call failed)
    +-- ProviderNotImplementedError (embedding: reserved provider name)
    +-- NoVectorsError              (vector store: empty upsert)
    +-- StoreError                  (vector store: non-success response)
    +-- InvalidQueryError           (vector store: empty query vector)
    +-- DocumentNotFoundError       (persistence: unknown document id)
    +-- StatusConflictError         (persistence: concurrent status write)
    +-- DeadlineExceededError       (process: caller deadline fired)
    +-- ConfigurationError          (startup / missing service config)

Every error maps to a ``{code, message}`` pair at the HTTP boundary; see
:mod:`docpipe.api.middleware`.
"""

from __future__ import annotations


class DocPipeError(Exception):
    """Base exception for all docpipe errors.

    Every subclass carries a human-readable ``message``, a stable ``code``
    and an optional ``provider_name`` identifying which external service
    triggered the error.  ``__str__`` prefixes the provider name in brackets
    for log scanning, e.g. ``[openai] Rate limit exceeded``.
    """

    code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def to_dict(self) -> dict[str, str]:
        """Return the structured ``{code, message}`` pair shown to callers."""
        return {"code": self.code, "message": self._message}

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Upload: validation and extraction
# ---------------------------------------------------------------------------

class UnsupportedFormatError(DocPipeError):
    """Raised when a file's extension or declared content-type is not accepted."""

    code = "UNSUPPORTED_FORMAT"
    status_code = 415

    def __init__(self, message: str = "Unsupported file format", provider_name: str | None = None) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ExtractionFailedError(DocPipeError):
    """Raised when a supported file cannot be converted to plain text."""

    code = "EXTRACTION_FAILED"
    status_code = 422

    def __init__(self, message: str = "Text extraction failed", provider_name: str | None = None) -> None:
        super().__init__(message=message, provider_name=provider_name)


class FileTooLargeError(DocPipeError):
    """Raised when an input file exceeds the configured size ceiling."""

    code = "FILE_TOO_LARGE"
    status_code = 413

    def __init__(self, message: str = "File is too large", provider_name: str | None = None) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Process: chunking and configuration
# ---------------------------------------------------------------------------

class EmptyInputError(DocPipeError):
    """Raised when the chunker receives blank text."""

    code = "EMPTY_INPUT"
    status_code = 422

    def __init__(self, message: str = "Text to chunk is empty", provider_name: str | None = None) -> None:
        super().__init__(message=message, provider_name=provider_name)


class InvalidConfigError(DocPipeError):
    """Raised when an embedding configuration violates its policy bounds."""

    code = "INVALID_CONFIG"
    status_code = 422

    def __init__(self, message: str = "Invalid embedding configuration", provider_name: str | None = None) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Process: embedding providers
# ---------------------------------------------------------------------------

class NoInputError(DocPipeError):
    """Raised when the embedding step is called with no chunks."""

    code = "NO_INPUT"
    status_code = 422

    def __init__(self, message: str = "No chunks to embed", provider_name: str | None = None) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MissingCredentialsError(DocPipeError):
    """Raised when a provider that needs an API key has none configured."""

    code = "MISSING_CREDENTIALS"
    status_code = 400

    def __init__(self, message: str = "Provider API key is not configured", provider_name: str | None = None) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderError(DocPipeError):
    """Raised when an embedding provider call fails.

    ``chunk_index`` identifies the chunk whose embedding failed; partial
    results for earlier chunks are discarded by the caller.
    """

    code = "PROVIDER_ERROR"
    status_code = 502

    def __init__(
        self,
        message: str = "Embedding provider call failed",
        provider_name: str | None = None,
        chunk_index: int | None = None,
    ) -> None:
        self._chunk_index = chunk_index
        super().__init__(message=message, provider_name=provider_name)

    @property
    def chunk_index(self) -> int | None:
        return self._chunk_index


class ProviderNotImplementedError(DocPipeError):
    """Raised when a reserved provider name is selected."""

    code = "NOT_IMPLEMENTED"
    status_code = 501

    def __init__(self, message: str = "Provider is not implemented", provider_name: str | None = None) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Process: vector store
# ---------------------------------------------------------------------------

class NoVectorsError(DocPipeError):
    """Raised when an upsert is attempted with an empty vector list."""

    code = "NO_VECTORS"
    status_code = 422

    def __init__(self, message: str = "No vectors to store", provider_name: str | None = None) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StoreError(DocPipeError):
    """Raised when the vector store rejects a request or is unreachable.

    ``store_status`` is ``None`` for transport failures where no HTTP
    response was received.
    """

    code = "STORE_ERROR"
    status_code = 502

    def __init__(
        self,
        message: str = "Vector store request failed",
        provider_name: str | None = None,
        store_status: int | None = None,
        body: str = "",
    ) -> None:
        self._store_status = store_status
        self._body = body
        super().__init__(message=message, provider_name=provider_name)

    @property
    def store_status(self) -> int | None:
        return self._store_status

    @property
    def body(self) -> str:
        return self._body


class InvalidQueryError(DocPipeError):
    """Raised when a similarity query is issued with an empty vector."""

    code = "INVALID_QUERY"
    status_code = 422

    def __init__(self, message: str = "Query vector is empty", provider_name: str | None = None) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Persistence / orchestration
# ---------------------------------------------------------------------------

class DocumentNotFoundError(DocPipeError):
    """Raised when a document id does not exist in the document store."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Document not found", provider_name: str | None = None) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StatusConflictError(DocPipeError):
    """Raised when a conditional status update loses a race."""

    code = "STATUS_CONFLICT"
    status_code = 409

    def __init__(self, message: str = "Document status changed concurrently", provider_name: str | None = None) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DeadlineExceededError(DocPipeError):
    """Raised when the process pipeline does not finish before its deadline."""

    code = "DEADLINE_EXCEEDED"
    status_code = 504

    def __init__(self, message: str = "Processing deadline exceeded", provider_name: str | None = None) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(DocPipeError):
    """Raised when a required service is not configured."""

    code = "CONFIGURATION_ERROR"
    status_code = 500

    def __init__(self, message: str = "Invalid or missing configuration", provider_name: str | None = None) -> None:
        super().__init__(message=message, provider_name=provider_name)
