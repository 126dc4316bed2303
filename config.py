import os
from dotenv import load_dotenv
load_dotenv()


def _bool_env(name, default):
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///academy.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # bearer tokens issued by the auth service
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-jwt-secret")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

    AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
    AWS_S3_REGION = os.getenv("AWS_S3_REGION") or AWS_REGION
    S3_ENDPOINT = os.getenv("S3_ENDPOINT")
    S3_BUCKET = os.getenv("S3_BUCKET") or os.getenv("AWS_S3_BUCKET_NAME", "ai-hackathon-uploads")
    S3_ACCESS_KEY = os.getenv("S3_ACCESS_KEY")
    S3_SECRET_KEY = os.getenv("S3_SECRET_KEY")
    UPLOAD_URL_EXPIRES = int(os.getenv("UPLOAD_URL_EXPIRES", "3600"))

    # Textract polling: worst case blocks a request for interval * max_polls seconds
    TEXTRACT_POLL_INTERVAL = float(os.getenv("TEXTRACT_POLL_INTERVAL", "2"))
    TEXTRACT_MAX_POLLS = int(os.getenv("TEXTRACT_MAX_POLLS", "150"))

    LLM_PROVIDER = os.getenv("LLM_PROVIDER", "bedrock")  # bedrock/openai
    BEDROCK_MODEL_ID = os.getenv("BEDROCK_MODEL_ID", "amazon.titan-text-express-v1")
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_MAX_ATTEMPTS = int(os.getenv("OPENAI_MAX_ATTEMPTS", "4"))

    # tag new scenarios with a Comprehend key phrase instead of "General"
    SKILL_TAGGING = _bool_env("SKILL_TAGGING", True)


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET = "test-jwt-secret"
    S3_BUCKET = "test-bucket"
    TEXTRACT_POLL_INTERVAL = 0
    TEXTRACT_MAX_POLLS = 5
    OPENAI_MAX_ATTEMPTS = 2
    SKILL_TAGGING = False
