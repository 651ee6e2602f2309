import os

from dotenv import load_dotenv

load_dotenv()

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
APP_DEBUG = os.getenv("APP_DEBUG", "false").lower() in ("true", "1", "yes")

# Seed configuration
SEED_ON_STARTUP = os.getenv("SEED_ON_STARTUP", "true").lower() in ("true", "1", "yes")
SEED_RANDOM = int(os.getenv("SEED_RANDOM", "1337"))
SEED_USERS = int(os.getenv("SEED_USERS", "20"))
SEED_POSTS = int(os.getenv("SEED_POSTS", "30"))

# Query configuration
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
SEARCH_LIMIT_PER_TYPE = int(os.getenv("SEARCH_LIMIT_PER_TYPE", "10"))
RELATED_POSTS_LIMIT = int(os.getenv("RELATED_POSTS_LIMIT", "5"))
FEED_PAGE_SIZE = int(os.getenv("FEED_PAGE_SIZE", "20"))
