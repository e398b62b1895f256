import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "driving-school-dev-secret"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "driving_school")

    # Dev helpers
    AUTO_INIT_DB = bool(int(os.environ.get("AUTO_INIT_DB", "0")))
    AUTO_SEED_DB = bool(int(os.environ.get("AUTO_SEED_DB", "0")))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Schedule grid (presentation only)
    GRID_START_HOUR = int(os.environ.get("GRID_START_HOUR", "7"))
    GRID_END_HOUR = int(os.environ.get("GRID_END_HOUR", "22"))
    ROW_HEIGHT = int(os.environ.get("ROW_HEIGHT", "80"))


SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = {
    "host": Config.DB_HOST,
    "port": Config.DB_PORT,
    "user": Config.DB_USER,
    "password": Config.DB_PASSWORD,
    "database": Config.DB_NAME,
}

DEBUG = bool(int(os.environ.get("DEBUG", "1")))

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB
LOG_LEVEL = Config.LOG_LEVEL
GRID_START_HOUR = Config.GRID_START_HOUR
GRID_END_HOUR = Config.GRID_END_HOUR
ROW_HEIGHT = Config.ROW_HEIGHT
