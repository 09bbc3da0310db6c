import logging
import random
from typing import Any, Optional, Protocol

import httpx

from ..models import Industry, LoanApplication, RiskResult, ShapValue

logger = logging.getLogger(__name__)

LOW_RISK_SECTORS = {Industry.TECH, Industry.MANUFACTURING}
HIGH_RISK_SECTORS = {Industry.RETAIL, Industry.HOSPITALITY}


class RiskEstimator(Protocol):
    """Produces a probability of default plus its explainability vector.

    Implementations may be non-deterministic; callers must not assume that
    estimating the same application twice gives the same answer.
    """

    async def estimate(self, application: LoanApplication) -> RiskResult:
        ...


class SimulatedRiskEstimator:
    """Stand-in scoring model: credit score drives PD, with sampled noise."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    async def estimate(self, application: LoanApplication) -> RiskResult:
        base = (850 - application.credit_score) / 850
        noise = self._rng.uniform(-0.1, 0.1)
        pd = max(0.0, min(1.0, base + noise))
        if application.industry in LOW_RISK_SECTORS:
            pd -= 0.1
        pd = max(0.0, pd)

        shap_values = [
            ShapValue(feature="Credit History", impact=-0.25 if application.credit_score > 700 else 0.3),
            ShapValue(feature="Revenue Stability", impact=-0.15 if application.revenue > 200_000 else 0.05),
            ShapValue(feature="Sector Risk", impact=0.1 if application.industry in HIGH_RISK_SECTORS else -0.05),
            ShapValue(feature="Debt Ratio", impact=self._rng.uniform(-0.1, 0.1)),
        ]
        return RiskResult.from_probability(pd, shap_values)


class HttpRiskEstimator:
    """
    Delegates scoring to an external model endpoint.

    POST {base_url}/score with the application JSON; expects
    {"probability_of_default": float, "shap_values": [{"feature", "impact"}]}.
    Transport errors, HTTP errors and a PD that is not a finite value in
    [0, 1] propagate; the decision engine turns them into SignalUnavailable.
    """

    def __init__(self, base_url: str, timeout: float = 5.0, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def estimate(self, application: LoanApplication) -> RiskResult:
        payload = application.model_dump(mode="json")
        if self._client is not None:
            body = await self._score(self._client, payload)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                body = await self._score(client, payload)

        return RiskResult.from_probability(
            float(body["probability_of_default"]),
            [ShapValue.model_validate(item) for item in body.get("shap_values", [])],
        )

    async def _score(self, client: httpx.AsyncClient, payload: dict[str, Any]) -> dict[str, Any]:
        response = await client.post(f"{self.base_url}/score", json=payload)
        response.raise_for_status()
        logger.debug(f"Risk service scored {payload['id']}")
        return response.json()
