"""Application settings loaded from environment variables via pydantic-settings.

Values are read from two sources, in priority order:

  1. **Environment variables**, e.g. ``PINECONE_API_KEY=pc-abc123``
  2. **.env file**: key=value lines in the project root ``.env``

Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY`` automatically.
An empty string means "not configured"; callers check for it explicitly
rather than relying on ``None``.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """docpipe application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Embedding Providers ===
    # Fallback key when a process request does not carry its own providerApiKey.
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_embedding_model: str = "text-embedding-3-small"
    huggingface_api_key: str = ""

    # === Vector Store ===
    pinecone_api_key: str = ""
    # Full data-plane host of the index, e.g. https://admin-docs-abc123.svc.pinecone.io
    pinecone_index_host: str = ""
    pinecone_timeout_seconds: float = 30.0

    # === Persistence ===
    document_db_path: str = "data/documents.db"

    # === Upload / Processing ===
    upload_temp_dir: str = "temp/uploads"
    max_upload_bytes: int = 100 * 1024 * 1024
    process_timeout_seconds: float = 300.0

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    # Comma-separated browser origins allowed by CORS; "*" allows any.
    cors_allowed_origins: str = "*"

    def get_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    def get_available_embedding_providers(self) -> list[str]:
        """Return the embedding provider names that have a server-side key configured."""
        providers: list[str] = []
        if self.openai_api_key:
            providers.append("openai")
        return providers
