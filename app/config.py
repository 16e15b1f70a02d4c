"""
Configuration de l'application / Application configuration.
Utilise pydantic-settings pour charger depuis .env ou variables d'environnement.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Planif Prestations"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True

    # Database - SQLite par défaut pour le développement
    # Database - SQLite by default for development
    DATABASE_URL: str = "sqlite+aiosqlite:///./reservations.db"

    # CORS - origines autorisées / allowed origins
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WRITE: str = "120/minute"

    # Moteur de réservation / Reservation engine
    OVERLAP_LABEL_LIMIT: int = 3  # nb max de périodes citées dans un message
    QUANTITY_TOLERANCE: float = 1e-9

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
