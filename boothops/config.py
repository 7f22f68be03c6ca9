import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Application database (tenants, login accounts)
APP_DATABASE_URL = os.getenv("APP_DATABASE_URL", "sqlite:///./boothops_app.db")

# Fernet key used to decrypt tenant data source URLs stored in the application database.
# When unset, data_source_url values are read as plaintext.
DATA_SOURCE_ENCRYPTION_KEY = os.getenv("DATA_SOURCE_ENCRYPTION_KEY")

# Tenant data source caches
TENANT_CONFIG_CACHE_TTL = int(os.getenv("TENANT_CONFIG_CACHE_TTL", "300"))
TENANT_ENGINE_CACHE_TTL = int(os.getenv("TENANT_ENGINE_CACHE_TTL", "3600"))

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

SESSION_TOKEN_EXPIRE_HOURS = int(os.getenv("SESSION_TOKEN_EXPIRE_HOURS", "12"))

# Root domain used to derive the tenant subdomain from the Host header
ROOT_DOMAIN = os.getenv("ROOT_DOMAIN", "boothops.app")

# Frontend base URL for links in emails
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "BoothOps <noreply@boothops.app>")

# Cloudflare R2 Configuration
R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY")
R2_BUCKET_NAME = os.getenv("R2_BUCKET_NAME", "boothops")

# Stripe - platform fallbacks, tenants normally configure their own keys in tenant_settings
STRIPE_API_URL = os.getenv("STRIPE_API_URL", "https://api.stripe.com/v1")
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_PUBLISHABLE_KEY = os.getenv("STRIPE_PUBLISHABLE_KEY")

# Staff form upload rate limit (per client IP)
UPLOAD_RATE_LIMIT = int(os.getenv("UPLOAD_RATE_LIMIT", "10"))
UPLOAD_RATE_WINDOW_SECONDS = int(os.getenv("UPLOAD_RATE_WINDOW_SECONDS", "60"))
MAX_UPLOAD_SIZE_BYTES = int(os.getenv("MAX_UPLOAD_SIZE_BYTES", str(10 * 1024 * 1024)))

# Optional Redis mirror for rate limit counters; counters stay in memory when unset
REDIS_URL = os.getenv("REDIS_URL")

# CORS
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
