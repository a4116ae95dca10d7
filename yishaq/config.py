from pathlib import Path
from dotenv import load_dotenv
import os

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")  # .env is optional, defaults below

APP_NAME = "YishaqShop"
ENV = os.getenv("ENV", "local")

# SQLite file next to the project unless overridden
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///{0}".format((BASE_DIR / "yishaq.db").as_posix()))

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
SESSION_MAX_AGE_DAYS = int(os.getenv("SESSION_MAX_AGE_DAYS", "7"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Checkout
ORDER_NUMBER_PREFIX = os.getenv("ORDER_NUMBER_PREFIX", "YSQ")
FREE_SHIPPING_THRESHOLD = int(os.getenv("FREE_SHIPPING_THRESHOLD", "1000"))
SHIPPING_FLAT_FEE = int(os.getenv("SHIPPING_FLAT_FEE", "99"))
DEFAULT_COUNTRY = os.getenv("DEFAULT_COUNTRY", "México")
CURRENCY = os.getenv("CURRENCY", "MXN")

# Login throttling
LOGIN_MAX_ATTEMPTS = int(os.getenv("LOGIN_MAX_ATTEMPTS", "5"))
LOGIN_BLOCK_SECONDS = int(os.getenv("LOGIN_BLOCK_SECONDS", "60"))
