"""
Transcript scoring for interview feedback.

Turns a finished call transcript into a FeedbackAssessment. Uses OpenAI if
available, otherwise falls back to a rule-based heuristic so the pipeline
works without an API key.
"""
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Optional, Sequence
from pydantic import BaseModel, Field, ValidationError, field_validator

from prepwise.llm.provider import LLMProvider
from prepwise.llm.openai_provider import get_openai_provider
from prepwise.llm.router import get_model_for_feature
from prepwise.schemas.feedback import CategoryScore

logger = logging.getLogger(__name__)

CATEGORIES = [
    "Communication Skills",
    "Technical Knowledge",
    "Problem-Solving",
    "Cultural & Role Fit",
    "Confidence & Clarity",
]


class ScoringError(Exception):
    """Raised when the scoring collaborator cannot produce an assessment."""


def _clamp_score(value) -> int:
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, score))


class FeedbackAssessment(BaseModel):
    """Structured assessment of one interview."""
    total_score: int = Field(..., ge=0, le=100, description="Overall score 0-100")
    category_scores: list[CategoryScore] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    areas_for_improvement: list[str] = Field(default_factory=list)
    final_assessment: str = Field(..., description="Narrative assessment")

    @field_validator("total_score", mode="before")
    @classmethod
    def clamp_total(cls, v):
        return _clamp_score(v)

    @field_validator("category_scores", mode="before")
    @classmethod
    def clamp_categories(cls, v):
        if not isinstance(v, list):
            return []
        cleaned = []
        for item in v:
            if isinstance(item, dict):
                item = {**item, "score": _clamp_score(item.get("score"))}
            cleaned.append(item)
        return cleaned


def default_assessment() -> FeedbackAssessment:
    """Assessment written when a call ended before anything was said."""
    return FeedbackAssessment(
        total_score=0,
        category_scores=[CategoryScore(name=name, score=0, comment="No answers recorded.") for name in CATEGORIES],
        strengths=[],
        areas_for_improvement=["Complete the interview so your answers can be assessed."],
        final_assessment="The interview ended before any answers were recorded, so no assessment could be made.",
    )


def format_transcript(transcript: Sequence[dict]) -> str:
    """Render a transcript as '- role: content' lines."""
    return "".join(f"- {message['role']}: {message['content']}\n" for message in transcript)


class TranscriptScorer(ABC):
    """Produces an assessment for a finished transcript."""

    @abstractmethod
    def score(self, transcript: Sequence[dict]) -> FeedbackAssessment:
        """
        Score a transcript.

        Args:
            transcript: Ordered list of {"role", "content"} dicts

        Raises:
            ScoringError: if no assessment can be produced
        """
        pass


class LLMTranscriptScorer(TranscriptScorer):
    """Scores transcripts with a chat model returning JSON."""

    SYSTEM_PROMPT = (
        "You are a professional interviewer analyzing a mock interview. "
        "Your task is to evaluate the candidate based on structured categories. "
        "Be thorough and detailed. Don't be lenient with the candidate. "
        "If there are mistakes or areas for improvement, point them out."
    )

    def __init__(self, provider: LLMProvider, model: Optional[str] = None):
        self.provider = provider
        self.model = model or get_model_for_feature("feedback")

    def _build_prompt(self, transcript: Sequence[dict]) -> str:
        categories = "\n".join(f"- **{name}**" for name in CATEGORIES)
        return f"""Analyze this mock interview transcript.

Transcript:
{format_transcript(transcript)}
Score the candidate from 0 to 100 in the following areas. Do not add categories other than the ones provided:
{categories}

Respond with a single JSON object with these keys:
"total_score" (integer 0-100),
"category_scores" (list of {{"name", "score", "comment"}} in the order above),
"strengths" (list of strings),
"areas_for_improvement" (list of strings),
"final_assessment" (string)."""

    def _parse(self, text: str) -> FeedbackAssessment:
        json_match = re.search(r'\{.*\}', text, re.DOTALL)
        if not json_match:
            raise ScoringError("Model response did not contain JSON")
        try:
            data = json.loads(json_match.group())
            return FeedbackAssessment.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ScoringError(f"Invalid assessment returned by model: {e}") from e

    def score(self, transcript: Sequence[dict]) -> FeedbackAssessment:
        try:
            response = self.provider.chat(
                messages=[
                    {"role": "system", "content": self.SYSTEM_PROMPT},
                    {"role": "user", "content": self._build_prompt(transcript)},
                ],
                model=self.model,
                temperature=0.3,
                max_tokens=1500,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise ScoringError(f"Scoring model call failed: {e}") from e

        assessment = self._parse(response.content)
        logger.info(f"Transcript scored by model: model={self.model}, score={assessment.total_score}")
        return assessment


class RuleBasedScorer(TranscriptScorer):
    """
    Deterministic fallback scorer.

    Rewards answering every prompt with substantive, multi-sentence replies.
    Crude, but keeps the feedback flow usable without an LLM.
    """

    TARGET_WORDS_PER_ANSWER = 60

    def score(self, transcript: Sequence[dict]) -> FeedbackAssessment:
        answers = [m["content"] for m in transcript if m["role"] == "user" and m["content"].strip()]
        prompts = [m for m in transcript if m["role"] == "assistant"]

        if not answers:
            return default_assessment()

        word_counts = [len(answer.split()) for answer in answers]
        avg_words = sum(word_counts) / len(word_counts)
        depth = min(1.0, avg_words / self.TARGET_WORDS_PER_ANSWER)
        coverage = min(1.0, len(answers) / max(1, len(prompts)))
        sentences = sum(len(re.findall(r'[.!?](\s|$)', answer)) for answer in answers)
        structure = min(1.0, sentences / (2 * len(answers)))

        scores = {
            "Communication Skills": 40 + 60 * (0.6 * depth + 0.4 * structure),
            "Technical Knowledge": 30 + 60 * depth,
            "Problem-Solving": 30 + 50 * (0.5 * depth + 0.5 * structure),
            "Cultural & Role Fit": 50 + 40 * coverage,
            "Confidence & Clarity": 40 + 50 * (0.5 * coverage + 0.5 * structure),
        }
        category_scores = [
            CategoryScore(name=name, score=_clamp_score(value), comment="Estimated from answer length and coverage.")
            for name, value in scores.items()
        ]
        total = sum(c.score for c in category_scores) / len(category_scores)

        strengths = []
        improvements = []
        if depth >= 0.8:
            strengths.append("Answers were detailed.")
        else:
            improvements.append("Give longer answers with concrete examples.")
        if coverage >= 0.8:
            strengths.append("Responded to nearly every question.")
        else:
            improvements.append("Answer each question the interviewer asks.")
        if structure >= 0.8:
            strengths.append("Answers were well structured.")
        else:
            improvements.append("Structure answers into complete sentences, e.g. with the STAR method.")

        return FeedbackAssessment(
            total_score=total,
            category_scores=category_scores,
            strengths=strengths,
            areas_for_improvement=improvements,
            final_assessment=(
                f"The candidate gave {len(answers)} answer(s) averaging {avg_words:.0f} words. "
                "This is an automated estimate; configure an AI provider for a detailed assessment."
            ),
        )


def get_transcript_scorer() -> TranscriptScorer:
    """Scorer dependency: the LLM scorer when OpenAI is configured, otherwise rule-based."""
    provider = get_openai_provider()
    if provider is None:
        return RuleBasedScorer()
    return LLMTranscriptScorer(provider)
