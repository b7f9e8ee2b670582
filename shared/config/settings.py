import os
from dotenv import load_dotenv

load_dotenv()

DB_USER = os.getenv("POSTGRES_USER", "postgres")
DB_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
DB_HOST = os.getenv("POSTGRES_HOST", "localhost") # In Docker, this will be 'postgres'
DB_PORT = os.getenv("POSTGRES_PORT", "5433")
DB_NAME = os.getenv("POSTGRES_DB", "storefront")

# DATABASE_URL wins over the POSTGRES_* parts when set
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

CHECKOUT_RATE_LIMIT = os.getenv("CHECKOUT_RATE_LIMIT", "10/minute")

# Seconds the simulated gateway waits before answering
PAYMENT_SIMULATED_DELAY = float(os.getenv("PAYMENT_SIMULATED_DELAY", "2.0"))
CURRENCY = os.getenv("STORE_CURRENCY", "INR")

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "orders@powerfuel.example")

OTEL_ENABLED = os.getenv("OTEL_ENABLED", "true").lower() == "true"
OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT", "http://localhost:4317")

# Security
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
INTERNAL_API_KEY = os.getenv("INTERNAL_API_KEY", "")
