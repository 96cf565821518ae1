# license_service/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file

class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "License Service"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for the client applications
    CORS_ORIGINS: list[str] = [
        "https://galabot.netlify.app",
        "https://galasoft.netlify.app",
        "https://galaweb.netlify.app",
    ]

    # WebSocket liveness: seconds between two "ping" probes.
    # Two silent intervals in a row close the connection.
    heartbeat_interval: float = float(os.getenv("HEARTBEAT_INTERVAL", "30"))

settings = Settings()  # Instantiate configuration
