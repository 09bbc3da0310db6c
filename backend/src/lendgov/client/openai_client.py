import os
from typing import Optional

from openai import AsyncOpenAI

from ..config.settings import settings


def get_openai_client(base_url: Optional[str] = None) -> AsyncOpenAI:
    base_url = base_url or settings.LLM_API_BASE_URL
    if not base_url:
        raise RuntimeError("LLM_API_BASE_URL environment variable is required.")
    return AsyncOpenAI(api_key=os.getenv("LLM_API_KEY", "http"), base_url=base_url)
