from pydantic import Field
from pydantic_settings import BaseSettings

from app.core import limits


class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "ACORD 25 Analyzer"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Groq (OpenAI-compatible endpoint)
    groq_api_key: str | None = Field(default=None, alias="GROQ_API_KEY")
    groq_base_url: str = Field(
        default="https://api.groq.com/openai/v1", alias="GROQ_BASE_URL",
    )
    vision_models: list[str] = Field(
        default=[
            "meta-llama/llama-4-scout-17b-16e-instruct",
            "meta-llama/llama-4-maverick-17b-128e-instruct",
        ],
        alias="VISION_MODELS",
    )  # tried in order, once each
    vision_temperature: float = Field(default=0.0, alias="VISION_TEMPERATURE")
    vision_top_p: float = Field(default=1.0, alias="VISION_TOP_P")
    vision_max_completion_tokens: int = Field(
        default=8141, alias="VISION_MAX_COMPLETION_TOKENS",
    )
    request_timeout: float = Field(
        default=limits.REQUEST_TIMEOUT_SECONDS, alias="REQUEST_TIMEOUT",
    )  # seconds, per model attempt

    # Upload limits
    max_images: int = Field(default=limits.MAX_IMAGES, alias="MAX_IMAGES")
    max_image_size_mb: int = Field(default=2, alias="MAX_IMAGE_SIZE_MB")
    max_total_size_mb: int = Field(default=4, alias="MAX_TOTAL_SIZE_MB")
    max_document_size_mb: int = Field(default=10, alias="MAX_DOCUMENT_SIZE_MB")
    max_pdf_pages: int = Field(default=limits.MAX_PDF_PAGES, alias="MAX_PDF_PAGES")

    # Features
    enable_pdf_conversion: bool = Field(
        default=True, alias="ENABLE_PDF_CONVERSION",
    )  # server-side rasterization of a single uploaded PDF
    enable_image_upload: bool = Field(default=True, alias="ENABLE_IMAGE_UPLOAD")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def ai_enabled(self) -> bool:
        """AI features are available only when a Groq key is configured."""
        return bool(self.groq_api_key)

    @property
    def upload_limits(self) -> limits.UploadLimits:
        return limits.UploadLimits(
            max_images=self.max_images,
            max_image_size=self.max_image_size_mb * limits.MIB,
            max_total_size=self.max_total_size_mb * limits.MIB,
            max_document_size=self.max_document_size_mb * limits.MIB,
            max_pdf_pages=self.max_pdf_pages,
        )


settings = Settings()
