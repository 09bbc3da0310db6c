from . import applications, audit, batch, config, reviews

__all__ = ["applications", "audit", "batch", "config", "reviews"]
