"""Synthetic application source for batch simulation."""
import random
from typing import Optional

from ..models import Industry, LoanApplication, utcnow

BUSINESS_PREFIXES = ["Alpha", "Nexus", "Global", "Prime", "Elite", "Green", "Tech", "Iron", "Golden", "Silver"]
BUSINESS_SUFFIXES = ["Solutions", "Logistics", "Retail", "Systems", "Holdings", "Ventures", "Labs", "Group", "Partners"]
DESCRIPTIONS = [
    "Requesting capital for inventory expansion during the holiday season.",
    "Seeking funds to upgrade manufacturing equipment and automate assembly lines.",
    "Working capital required to hire 3 new senior developers for upcoming project.",
    "Refinancing existing high-interest debt to improve monthly cash flow.",
    "Opening a new storefront in the downtown district to capture foot traffic.",
    "Investment in new marketing campaign to target enterprise clients.",
    "Urgent need for cash flow due to delayed payments from a major client.",
    "Expansion into international markets, specifically Southeast Asia.",
]


def generate_application(rng: Optional[random.Random] = None) -> LoanApplication:
    rng = rng or random.Random()
    return LoanApplication(
        id=f"LN-{rng.randrange(100000):05d}-{rng.randrange(16**6):06x}",
        business_name=f"{rng.choice(BUSINESS_PREFIXES)} {rng.choice(BUSINESS_SUFFIXES)}",
        applicant_name="Synthetic Applicant",
        revenue=rng.randrange(30_000, 5_000_000),
        requested_amount=rng.randrange(5_000, 100_000),
        credit_score=rng.randrange(450, 850),
        industry=rng.choice(list(Industry)),
        description=rng.choice(DESCRIPTIONS),
        application_date=utcnow(),
    )
