import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    def __init__(self):
        # Document store
        self.MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017")
        self.DB_NAME = os.environ.get("DB_NAME", "scraper_db")
        self.MONGO_TIMEOUT_MS = int(os.environ.get("MONGO_TIMEOUT_MS", "5000"))

        # Extraction oracle (OpenAI-compatible chat endpoint)
        self.DEEPSEEK_API_KEY = os.environ.get("DEEPSEEK_API_KEY", "")
        self.AI_BASE_URL = os.environ.get("AI_BASE_URL", "https://api.deepseek.com/v1")
        self.AI_MODEL = os.environ.get("AI_MODEL", "deepseek-chat")
        self.REQUEST_TIMEOUT = int(os.environ.get("REQUEST_TIMEOUT", "60"))
        self.MAX_PAGE_CHARS = int(os.environ.get("MAX_PAGE_CHARS", "60000"))

        # Browser
        self.HEADLESS = os.environ.get("HEADLESS", "true").lower() == "true"
        self.NAVIGATION_TIMEOUT_MS = int(os.environ.get("NAVIGATION_TIMEOUT_MS", "30000"))
        self.USER_AGENT = os.environ.get(
            "USER_AGENT",
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        )

        # Scrape run
        self.CATEGORY_URL = os.environ.get("CATEGORY_URL", "https://www.amazon.com/s?k=laptops")
        self.MAX_PRODUCTS = int(os.environ.get("MAX_PRODUCTS", "3"))
        self.WEBSITE_NAME = os.environ.get("WEBSITE_NAME", "Amazon")
        self.PAGE_SETTLE_MS = int(os.environ.get("PAGE_SETTLE_MS", "2000"))
        self.SCROLL_SETTLE_MS = int(os.environ.get("SCROLL_SETTLE_MS", "1000"))
        self.ITEM_DELAY_MS = int(os.environ.get("ITEM_DELAY_MS", "2000"))

        # Error tracking
        self.SENTRY_DSN = os.environ.get("SENTRY_DSN", "")
        self.ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")

        # Application settings
        self.DEBUG = os.environ.get("DEBUG", "false").lower() == "true"
        self.LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    @property
    def has_sentry(self) -> bool:
        return bool(self.SENTRY_DSN)

    @property
    def has_ai(self) -> bool:
        return bool(self.DEEPSEEK_API_KEY)


# Create an instance
config = Config()
