import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    # Flask
    SECRET_KEY: str = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')
    ENV: str = os.getenv('FLASK_ENV', 'development')
    DEBUG: bool = os.getenv('FLASK_DEBUG', 'True').lower() == 'true'
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Backend REST API
    API_URL: str = os.getenv('API_URL', 'https://fuelsync-backend.onrender.com/api')
    API_TIMEOUT: float = float(os.getenv('API_TIMEOUT', '15'))

    # Origins allowed to call the /api/* JSON endpoints
    CORS_ORIGINS: str = os.getenv('CORS_ORIGINS', '*')

    CURRENCY_SYMBOL: str = os.getenv('CURRENCY_SYMBOL', '₹')


config = Config()
