"""docpipe API layer: routes, schemas, and middleware."""

from docpipe.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from docpipe.api.routes import router
from docpipe.api.schemas import (
    ErrorResponse,
    HealthResponse,
    ProcessDocumentRequest,
    QueryRequest,
    QueryResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "ErrorResponse",
    "HealthResponse",
    "ProcessDocumentRequest",
    "QueryRequest",
    "QueryResponse",
]
