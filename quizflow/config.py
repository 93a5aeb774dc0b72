from dotenv import load_dotenv
import os

load_dotenv()

# Where the quiz catalog and grading endpoints live (consumed by the session engine)
QUIZ_API_URL = os.getenv("QUIZ_API_URL", "http://localhost:8000")
QUIZ_API_TIMEOUT = float(os.getenv("QUIZ_API_TIMEOUT", "10"))

# Reference Quiz API storage
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./quizflow.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

# Countdown tick length in seconds
TICK_INTERVAL = float(os.getenv("QUIZ_TICK_INTERVAL", "1"))

# Reference Quiz API; comma separated, no trailing slash
CORS_ORIGINS = [o.strip() for o in os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000",
).split(",") if o.strip()]
