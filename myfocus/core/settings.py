"""
Application settings and configuration management.
"""
from typing import List
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Supabase Configuration (auth only, tokens verified locally)
    supabase_url: str = ""
    supabase_jwt_secret: str = ""
    
    # Database
    database_url: str = "sqlite:///./myfocus.db"
    
    # YooKassa Configuration
    yookassa_shop_id: str = ""
    yookassa_secret_key: str = ""
    yookassa_api_url: str = "https://api.yookassa.ru/v3"
    yookassa_timeout_seconds: float = 10.0
    
    # Payment Configuration
    payment_currency: str = "RUB"
    payment_return_url: str = ""
    
    # Rate Limiting
    enable_rate_limiting: bool = True
    promo_validation_rate_limit: str = "30/minute"
    
    # Application Settings
    environment: str = "development"
    app_version: str = "1.0.0"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    
    # CORS Settings
    allowed_origins: str = "http://localhost:5173,http://localhost:8080"
    
    # Logging
    log_level: str = "INFO"
    
    # Monitoring & Observability
    sentry_dsn: str = ""
    sentry_traces_sample_rate: float = 0.1
    enable_metrics: bool = True
    
    # Habit snapshot storage
    habit_storage_path: str = "~/.myfocus/habit.json"
    
    @field_validator("allowed_origins")
    def validate_origins(cls, v):
        """Convert comma-separated origins string to list."""
        if isinstance(v, list):
            return v
        return [origin.strip() for origin in v.split(",") if origin.strip()]
    
    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"
    
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"
    
    @property
    def effective_return_url(self) -> str:
        """URL the gateway sends the user back to after confirmation."""
        if self.payment_return_url:
            return self.payment_return_url
        return f"{self.supabase_url.rstrip('/')}/functions/v1/payment-success"
    
    def validate_production_config(self) -> List[str]:
        """Validate production configuration and return list of issues."""
        issues = []
        
        if self.is_production:
            if not self.supabase_jwt_secret:
                issues.append("SUPABASE_JWT_SECRET must be set in production")
            
            if not self.yookassa_shop_id or not self.yookassa_secret_key:
                issues.append("YooKassa credentials must be set in production")
            
            if self.database_url.startswith("sqlite"):
                issues.append("SQLite should not be used in production")
            
            if "localhost" in str(self.allowed_origins):
                issues.append("Localhost origins should be removed in production")
        
        return issues
    
    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
