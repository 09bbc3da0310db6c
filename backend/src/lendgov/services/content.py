import json
import logging
from typing import Optional, Protocol

from openai import AsyncOpenAI

from ..models import ContentResult, LoanApplication, Sentiment
from ..utils.text import clean_text, normalize_for_matching

logger = logging.getLogger(__name__)

# (keywords, flag) pairs; a flag is raised once if any keyword appears.
KEYWORD_FLAGS = [
    (("debt", "refinance"), "Refinancing existing debt"),
    (("urgent",), "Urgency detected - potential cash flow distress"),
    (("gamble", "casino"), "High risk keyword detected in description"),
]


class ContentAnalyzer(Protocol):
    """Inspects free-text application fields for semantic risk flags."""

    async def analyze(self, application: LoanApplication) -> ContentResult:
        ...


def summarize(application: LoanApplication) -> str:
    return (
        f"Applicant {application.business_name} ({application.industry.value}) seeks "
        f"${application.requested_amount:,.0f} for: \"{clean_text(application.description)}\"."
    )


class KeywordContentAnalyzer:
    """Keyword stand-in for a language model classifier."""

    def __init__(self, keyword_flags=None):
        self.keyword_flags = keyword_flags or KEYWORD_FLAGS

    async def analyze(self, application: LoanApplication) -> ContentResult:
        text = normalize_for_matching(application.description)
        flags = [flag for keywords, flag in self.keyword_flags if any(k in text for k in keywords)]

        if flags:
            sentiment = Sentiment.NEUTRAL
            reasoning = (
                f"Detected caution markers related to: {', '.join(flags)}. "
                "Context suggests defensive capital usage."
            )
        else:
            sentiment = Sentiment.POSITIVE
            reasoning = (
                "Applicant demonstrates clear growth intent (expansion/assets) "
                "with no linguistic markers of financial distress."
            )

        return ContentResult(summary=summarize(application), flags=flags, sentiment=sentiment, reasoning=reasoning)


SYSTEM_PROMPT = """You are a credit analyst reviewing the stated purpose of a business loan.
Identify linguistic risk markers such as debt refinancing, cash-flow distress, urgency,
or restricted activities (gambling, speculation).

Respond with a single JSON object and nothing else:
{"summary": str, "flags": [str], "sentiment": "Positive" | "Neutral" | "Negative", "reasoning": str}

"flags" is empty when nothing is concerning. Use "Positive" only when "flags" is empty."""


class LlmContentAnalyzer:
    """Classifies the purpose description through an OpenAI-compatible endpoint."""

    def __init__(self, client: AsyncOpenAI, model: str = "gemma3", temperature: float = 0.2):
        self.client = client
        self.model = model
        self.temperature = temperature

    async def analyze(self, application: LoanApplication) -> ContentResult:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": (
                    f"Business: {application.business_name}\n"
                    f"Industry: {application.industry.value}\n"
                    f"Requested amount: {application.requested_amount:,.0f}\n"
                    f"Purpose: {clean_text(application.description)}"
                ),
            },
        ]
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=512,
            response_format={"type": "json_object"},
        )
        content = response.choices[0].message.content or ""
        return self._parse(content.strip(), application)

    def _parse(self, content: str, application: LoanApplication) -> ContentResult:
        if content.startswith("```"):
            content = content.strip("`").removeprefix("json").strip()
        data = json.loads(content)

        flags = [str(flag) for flag in data.get("flags") or []]
        sentiment: Optional[str] = data.get("sentiment")
        # Model answers are coerced onto the flags/sentiment invariant.
        if not flags:
            if sentiment != Sentiment.POSITIVE.value:
                logger.warning(f"LLM sentiment {sentiment!r} with no flags for {application.id}, using Positive")
            sentiment = Sentiment.POSITIVE.value
        elif sentiment == Sentiment.POSITIVE.value or sentiment not in {s.value for s in Sentiment}:
            logger.warning(f"LLM sentiment {sentiment!r} inconsistent with flags for {application.id}")
            sentiment = Sentiment.NEUTRAL.value

        return ContentResult(
            summary=data.get("summary") or summarize(application),
            flags=flags,
            sentiment=sentiment,
            reasoning=data.get("reasoning") or "",
        )
