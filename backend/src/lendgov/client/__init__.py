from .openai_client import get_openai_client

__all__ = ["get_openai_client"]
