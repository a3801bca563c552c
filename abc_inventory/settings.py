import os
from decimal import Decimal
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
# Use Path objects for robust, OS-agnostic path handling.
DATA_DIR = BASE_DIR / os.getenv("DATA_DIR", "data")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")

# --- Filename Configuration ---
PRODUCTS_FILENAME = os.getenv("PRODUCTS_FILENAME", "products.json")
PRODUCTS_FILE = DATA_DIR / PRODUCTS_FILENAME
REPORT_FILENAME_BASE = os.getenv("REPORT_FILENAME", "abc_report")

# --- Output Switches ---
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "false").lower() in ("1", "true", "yes")
TEST_MODE = os.getenv("TEST_MODE", "false").lower() in ("1", "true", "yes")

# --- Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")

# --- Shared Business Logic ---
# Cumulative percentage cut-offs for the Pareto tiers (inclusive).
A_THRESHOLD = Decimal(os.getenv("ABC_A_THRESHOLD", "80"))
B_THRESHOLD = Decimal(os.getenv("ABC_B_THRESHOLD", "95"))

# Column order for the printed table and the CSV report.
REPORT_COLUMNS = [
    "classification",
    "code",
    "name",
    "movesPerMonth",
    "unitPrice",
    "totalValue",
    "accumulatedPercentage",
]
