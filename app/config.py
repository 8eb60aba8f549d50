import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/rooms_booking.db")

# JWT verification; tokens are issued by the identity service
SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

# Request payloads must target today or later unless this is set
ALLOW_PAST_DATES = os.getenv("ALLOW_PAST_DATES", "false").lower() == "true"

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8000"))
