import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

RISK_BACKENDS = {"simulated", "http"}
CONTENT_BACKENDS = {"keyword", "llm"}


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    BASE_DIR = Path(__file__).resolve().parent.parent

    def __init__(self):
        self.MIN_CREDIT_SCORE = int(os.getenv("LENDGOV_MIN_CREDIT_SCORE", "600"))
        self.MAX_LOAN_AMOUNT = int(os.getenv("LENDGOV_MAX_LOAN_AMOUNT", "50000"))
        self.AI_CONFIDENCE_THRESHOLD = int(os.getenv("LENDGOV_AI_CONFIDENCE_THRESHOLD", "80"))
        self.STRICT_INDUSTRY_CHECKING = _flag("LENDGOV_STRICT_INDUSTRY_CHECKING", "true")

        self.RISK_BACKEND = os.getenv("RISK_BACKEND", "simulated")
        if self.RISK_BACKEND not in RISK_BACKENDS:
            raise RuntimeError(f"RISK_BACKEND must be one of {sorted(RISK_BACKENDS)}")
        self.RISK_SERVICE_URL = os.getenv("RISK_SERVICE_URL")
        if self.RISK_BACKEND == "http" and not self.RISK_SERVICE_URL:
            raise RuntimeError("RISK_SERVICE_URL environment variable is required for the http risk backend.")

        self.CONTENT_BACKEND = os.getenv("CONTENT_BACKEND", "keyword")
        if self.CONTENT_BACKEND not in CONTENT_BACKENDS:
            raise RuntimeError(f"CONTENT_BACKEND must be one of {sorted(CONTENT_BACKENDS)}")
        self.LLM_API_BASE_URL = os.getenv("LLM_API_BASE_URL")
        if self.CONTENT_BACKEND == "llm" and not self.LLM_API_BASE_URL:
            raise RuntimeError("LLM_API_BASE_URL environment variable is required for the llm content backend.")
        self.LLM_MODEL = os.getenv("LLM_MODEL", "gemma3")

        self.SIGNAL_TIMEOUT_SECONDS = float(os.getenv("SIGNAL_TIMEOUT_SECONDS", "5.0"))

        # Unset keeps the audit trail in memory.
        self.DATABASE_URL = os.getenv("DATABASE_URL")
        self.AUDIT_RETRY_ATTEMPTS = int(os.getenv("AUDIT_RETRY_ATTEMPTS", "5"))
        self.AUDIT_RETRY_BACKOFF_SECONDS = float(os.getenv("AUDIT_RETRY_BACKOFF_SECONDS", "0.5"))

        self.LOG_FILE = os.getenv("LOG_FILE", "lendgov.log")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
