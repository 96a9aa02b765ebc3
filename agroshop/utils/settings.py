# agroshop/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./agroshop.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
ADMIN_TOKEN = os.getenv("ADMIN_TOKEN", "")

# limit zapytania IN w magazynie dokumentow
PRODUCT_CHUNK_SIZE = int(os.getenv("PRODUCT_CHUNK_SIZE", 10))
MAX_TRANSACTION_DOCUMENTS = int(os.getenv("MAX_TRANSACTION_DOCUMENTS", 500))
TRANSACTION_MAX_ATTEMPTS = int(os.getenv("TRANSACTION_MAX_ATTEMPTS", 5))
