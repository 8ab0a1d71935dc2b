from typing import Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""
    
    # Database
    DATABASE_URL: str
    
    # API
    API_TITLE: str = "MaternaCare API"
    API_VERSION: str = "1.0.0"
    DEBUG: bool = True
    BASE_URL: str = "http://localhost:8000"
    
    # Security
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_DAYS: int = 1
    
    # Storage
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024
    SIGNED_URL_EXPIRES_SECONDS: int = 3600
    
    # First administrator, created by init_db
    INITIAL_ADMIN_NAME: Optional[str] = None
    INITIAL_ADMIN_PASSWORD: Optional[str] = None
    
    # Appointment status selects
    STATUS_DEBOUNCE_SECONDS: float = 0.3
    
    class Config:
        env_file = ".env"
        case_sensitive = True

# Create settings instance
settings = Settings()
