from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"

    DATABASE_URL: str = "sqlite:///./quizrank.db"
    AUTO_CREATE_TABLES: bool = True
    PROJECT_NAME: str = "QuizRank Session & Ranking Service"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Exam session
    EXAM_GRACE_WINDOW_SECONDS: int = 5
    DEFAULT_QUIZ_DURATION_MINUTES: int = 15

    # Leaderboards
    QUIZ_TOP_RANKERS: int = 3

    # Azure OpenAI Configuration (question generator)
    AOAI_ENDPOINT: str = ""
    AOAI_API_KEY: str = ""
    AOAI_API_VERSION: str = "2024-02-01"
    AOAI_DEPLOY_GPT4O_MINI: str = "gpt-4o-mini"
    GENERATOR_TEMPERATURE: float = 0.3
    GENERATOR_TIMEOUT_SECONDS: float = 120.0

    # Lecture text handed to the generator
    LECTURE_TEXT_LIMIT: int = 4000
    MIN_LECTURE_TEXT_LENGTH: int = 50

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
