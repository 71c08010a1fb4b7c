# galaxion/utils/config.py
import os
from typing import List
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env file before defining settings
load_dotenv()

class Settings(BaseSettings):
    # Storage and seed data
    database_url: str = "sqlite+aiosqlite:///./galaxion.db"
    catalog_path: str = "data/catalog.json"

    # Web / session settings
    session_secret: str = "nova-ai-university-secret"
    session_max_age: int = 86400 # 24 hours
    admin_usernames: List[str] = ["admin"]
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    # --- LLM Provider Configuration ---
    llm_provider: str = os.getenv("LLM_PROVIDER", "offline").lower()

    # Ollama specific
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "mistral")

    # OpenAI specific
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_model_name: str = os.getenv("OPENAI_MODEL_NAME", "gpt-3.5-turbo")

    # Google Gemini specific
    google_api_key: str | None = os.getenv("GOOGLE_API_KEY")
    google_model_name: str = os.getenv("GOOGLE_MODEL_NAME", "gemini-1.5-flash-latest")
    max_output_tokens: int = 512

    # Lessons and quizzes
    quiz_passing_score: int = 70 # percent
    lesson_base_xp: int = 10
    lesson_max_duration_multiplier: float = 3.0
    course_completion_bonus_share: float = 0.2 # of each course outcome gain
    note_max_length: int = 20000

    # Time Saved reporting
    time_saved_history_limit: int = 30
    time_saved_top_skills: int = 5

    # AI tutor
    tutor_history_limit: int = 20

settings = Settings()

# --- Validation for API keys based on provider ---
if settings.llm_provider == "openai" and not settings.openai_api_key:
    raise ValueError("LLM_PROVIDER is 'openai' but OPENAI_API_KEY is not set in .env")
if settings.llm_provider == "google" and not settings.google_api_key:
    raise ValueError("LLM_PROVIDER is 'google' but GOOGLE_API_KEY is not set in .env")
