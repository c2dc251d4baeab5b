"""Centralized configuration management."""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Base paths
BASE_DIR = Path(__file__).parent.parent
CONFIG_DIR = BASE_DIR / "config"
DATA_DIR = BASE_DIR / "data"
DATA_DIR.mkdir(parents=True, exist_ok=True)

# Plan, add-on and coupon catalog
CATALOG_PATH = Path(os.getenv("CATALOG_PATH", str(CONFIG_DIR / "catalog.json")))
CURRENCY = os.getenv("CURRENCY", "INR")

# Auth (HS256 access tokens issued by the auth provider)
AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET")
AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE", "authenticated")
# Users allowed to manage blog posts and webinar updates
ADMIN_USER_IDS = frozenset(
    user_id.strip() for user_id in os.getenv("ADMIN_USER_IDS", "").split(",") if user_id.strip()
)

# Payment gateway
RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID")
RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET")
RAZORPAY_API_URL = os.getenv("RAZORPAY_API_URL", "https://api.razorpay.com/v1/orders")
PAYMENT_GATEWAY_TIMEOUT = float(os.getenv("PAYMENT_GATEWAY_TIMEOUT", "20"))

# LLM (OpenAI-compatible router)
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
LLM_MODEL = os.getenv("LLM_MODEL", "google/gemini-2.5-flash")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))
LLM_MAX_RETRIES = int(os.getenv("LLM_MAX_RETRIES", "3"))
LLM_APP_REFERER = os.getenv("LLM_APP_REFERER", "https://primoboost.ai")
LLM_APP_TITLE = os.getenv("LLM_APP_TITLE", "PrimoBoost AI")

# Flask Settings
FLASK_PORT = int(os.getenv("FLASK_PORT", "8002"))
FLASK_DEBUG = os.getenv("FLASK_DEBUG", "false").lower() == "true"
SELF_BASE_URL = os.getenv("SELF_BASE_URL", f"http://localhost:{FLASK_PORT}")

# External browser automation service
EXTERNAL_BROWSER_SERVICE_URL = os.getenv("EXTERNAL_BROWSER_SERVICE_URL", "")
EXTERNAL_BROWSER_API_KEY = os.getenv("EXTERNAL_BROWSER_API_KEY", "")
EXTERNAL_BROWSER_TIMEOUT = float(os.getenv("EXTERNAL_BROWSER_TIMEOUT", "180"))

# Resume storage bucket
STORAGE_DIR = Path(os.getenv("STORAGE_DIR", str(DATA_DIR / "storage")))
STORAGE_PUBLIC_BASE_URL = os.getenv("STORAGE_PUBLIC_BASE_URL", f"{SELF_BASE_URL}/storage")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Database
DEFAULT_DB_PATH = DATA_DIR / "resumeboost.db"
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DEFAULT_DB_PATH}")
