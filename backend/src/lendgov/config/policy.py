import logging
import threading
from typing import Any, Optional

from pydantic import ValidationError

from ..exceptions import GovernanceError
from ..models import PolicyConfig

logger = logging.getLogger(__name__)


class InvalidPolicyConfig(GovernanceError):
    code = "LG_INVALID_POLICY_CONFIG"


class PolicyConfigStore:
    """
    Owns the operator's current PolicyConfig.

    PolicyConfig is frozen, so the object returned by current() is a
    consistent snapshot for the whole of one evaluation even if an operator
    swaps the config mid-flight. Updates apply to later evaluations only.
    """

    def __init__(self, defaults: Optional[PolicyConfig] = None):
        self._defaults = defaults or PolicyConfig()
        self._current = self._defaults
        self._lock = threading.Lock()

    def current(self) -> PolicyConfig:
        with self._lock:
            return self._current

    def update(self, **changes: Any) -> PolicyConfig:
        with self._lock:
            merged = {**self._current.model_dump(), **changes}
            try:
                updated = PolicyConfig.model_validate(merged)
            except ValidationError as exc:
                raise InvalidPolicyConfig(
                    "policy config update rejected",
                    details={"errors": [err["msg"] for err in exc.errors()]},
                ) from exc
            self._current = updated
        logger.info(f"Policy config updated: {updated.model_dump()}")
        return updated

    def reset(self) -> PolicyConfig:
        with self._lock:
            self._current = self._defaults
        logger.info("Policy config reset to defaults")
        return self._defaults
