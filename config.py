import os

DB_PATH = os.getenv("BOARD_DB_PATH", "board.db")
ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()]

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE") or None

# Server Configuration
DEFAULT_HOST = os.getenv("HOST", "0.0.0.0")
DEFAULT_PORT = int(os.getenv("PORT", "8000"))

# Board listing
THREAD_LIST_LIMIT = 10
RECENT_REPLIES_LIMIT = 3

# Soft-deleted replies keep their slot with this text
DELETED_REPLY_TEXT = "[deleted]"

# Plain-text outcomes
REPORTED = "reported"
SUCCESS = "success"
INCORRECT_PASSWORD = "incorrect password"

# Security Settings
MAX_REQUEST_SIZE_MB = 1

# HTTP Status Codes
HTTP_REQUEST_ENTITY_TOO_LARGE = 413
HTTP_INTERNAL_SERVER_ERROR = 500
