# settings.py
import os
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Project
    PROJECT_NAME: str = "Nainzaka Aesthetics API"
    API_PREFIX: str = "/api"

    # Security
    JWT_SECRET: str = os.getenv("JWT_SECRET", "super-secret-key")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY_MINUTES: int = 60 * 24  # 24h
    LOGIN_MAX_ATTEMPTS: int = 5
    LOGIN_LOCKOUT_MINUTES: int = 15

    # Seed admin (created on startup when both are set)
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite+aiosqlite:///./nainzaka.db"  # default local SQLite
    )

    # LLM (Groq, OpenAI-compatible)
    GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")
    GROQ_API_URL: str = "https://api.groq.com/openai/v1/chat/completions"
    GROQ_CHAT_MODEL: str = "llama-3.3-70b-versatile"
    GROQ_DESCRIPTION_MODEL: str = "llama-3.3-70b-versatile"
    LLM_TIMEOUT: float = 60.0

    # Image hosting: "imgbb" or "cloudinary"
    IMAGE_HOST: str = os.getenv("IMAGE_HOST", "imgbb")
    IMGBB_API_KEY: str = os.getenv("IMGBB_API_KEY", "")
    IMGBB_UPLOAD_URL: str = "https://api.imgbb.com/1/upload"
    CLOUDINARY_CLOUD_NAME: str = os.getenv("CLOUDINARY_CLOUD_NAME", "")
    CLOUDINARY_API_KEY: str = os.getenv("CLOUDINARY_API_KEY", "")
    CLOUDINARY_API_SECRET: str = os.getenv("CLOUDINARY_API_SECRET", "")
    CLOUDINARY_FOLDER: str = "nainzaka/products"
    UPLOAD_TIMEOUT: float = 30.0
    MAX_IMAGES: int = 3
    MAX_IMAGE_SIZE_MB: int = 5

    # Storefront
    WHATSAPP_NUMBER: str = os.getenv("WHATSAPP_NUMBER", "923404430083")
    CATALOG_MAX_PRICE: float = 50000
    STORE_CONTEXT_PATH: str = os.path.join(
        os.path.dirname(os.path.abspath(__file__)), "data", "store_context.json"
    )

    # Frontend origins (CORS), comma separated
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    class Config:
        env_file = ".env"
        case_sensitive = True


# ✅ Instantiate settings globally
settings = Settings()
