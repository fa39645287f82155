import os

# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./prepwise.db")
RUN_MIGRATIONS = os.getenv("RUN_MIGRATIONS", "0") == "1"

# ✅ Security
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# ✅ OpenAI
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
QUESTION_MODEL = os.getenv("QUESTION_MODEL", "gpt-4o-mini")
FEEDBACK_MODEL = os.getenv("FEEDBACK_MODEL", "gpt-4o")

# ✅ Voice agent
VAPI_WORKFLOW_ID = os.getenv("VAPI_WORKFLOW_ID", "")

# ✅ Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# ✅ CORS
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]
