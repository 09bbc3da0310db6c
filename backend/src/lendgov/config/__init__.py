from .policy import InvalidPolicyConfig, PolicyConfigStore
from .settings import Settings, settings

__all__ = ["InvalidPolicyConfig", "PolicyConfigStore", "Settings", "settings"]
