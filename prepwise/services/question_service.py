"""
Interview question generation.

Uses OpenAI if available, otherwise (or on any model error) falls back to a
static question bank keyed by interview type and experience level.
"""
import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from prepwise.llm.provider import LLMProvider
from prepwise.llm.openai_provider import get_openai_provider
from prepwise.llm.router import get_model_for_feature

logger = logging.getLogger(__name__)

QUESTION_COUNT = 5

_NUMBERED_LINE = re.compile(r'^\d+\.')


@dataclass
class QuestionSet:
    questions: list[str]
    fallback: bool = False


def _base_questions(role: str) -> dict[str, list[str]]:
    return {
        "Technical": [
            f"Explain your experience with {role} and the technologies you've worked with.",
            "Describe a challenging technical problem you solved in your previous role.",
            "How do you approach debugging and troubleshooting issues?",
            "What design patterns have you implemented in your projects?",
            "How do you ensure code quality and maintainability?",
        ],
        "Behavioral": [
            "Tell me about a time when you had to work under pressure to meet a deadline.",
            "Describe a situation where you had to collaborate with a difficult team member.",
            "Give me an example of a project where you took initiative to improve something.",
            "Tell me about a time when you failed and what you learned from it.",
            "Describe a situation where you had to learn a new technology quickly.",
        ],
        "Situational": [
            "How would you handle a situation where a client is not satisfied with your work?",
            "What would you do if you discovered a critical bug in production?",
            "How would you approach a project with unclear requirements?",
            "What would you do if you disagreed with a technical decision made by your team lead?",
            "How would you handle a situation where you're behind schedule on a project?",
        ],
        "Mixed": [
            f"Tell me about your experience with {role} and what interests you most about this field.",
            "Describe a technical challenge you faced and how you solved it.",
            "How do you stay updated with the latest technologies and industry trends?",
            "Give me an example of a project where you had to work with multiple stakeholders.",
            "What would you do if you had to implement a feature you've never worked with before?",
        ],
    }


def static_questions(role: str, interview_type: str, level: str, tech_stack: Sequence[str] = ()) -> list[str]:
    """Build a question list from the static bank."""
    bank = _base_questions(role)
    questions = bank.get(interview_type, bank["Mixed"])

    if level == "Entry":
        questions = [
            f"What motivated you to pursue a career in {role}?",
            "Tell me about your educational background and how it relates to this role.",
            "What projects have you worked on during your studies or personal time?",
            "How do you approach learning new technologies?",
            *questions[:3],
        ]
    elif level == "Senior":
        questions = [
            "How do you mentor junior developers and help them grow?",
            "Describe your experience leading technical projects and making architectural decisions.",
            "How do you handle technical debt and prioritize refactoring efforts?",
            "Tell me about a time when you had to make a difficult technical trade-off.",
            *questions[:3],
        ]

    if tech_stack:
        tech_questions = [
            f"Can you explain your experience with {tech} and how you've used it in projects?"
            for tech in tech_stack
        ]
        questions = [*tech_questions, *questions[:max(0, QUESTION_COUNT - len(tech_questions))]]

    return questions[:QUESTION_COUNT]


def _build_prompt(role: str, interview_type: str, level: str, tech_stack: Sequence[str]) -> str:
    tech_text = f" with focus on these technologies: {', '.join(tech_stack)}" if tech_stack else ""
    return f"""You are an expert interview coach. Generate exactly {QUESTION_COUNT} high-quality interview questions for a {level.lower()} level {role} position.

Interview Type: {interview_type}
Experience Level: {level}
Role: {role}{tech_text}

Requirements:
- Questions should be appropriate for {level.lower()} level candidates
- Focus on {interview_type.lower()} aspects
- Make questions specific to the {role} role
- Include practical, real-world scenarios
- Avoid generic or overly broad questions
- The questions are read aloud by a voice assistant, so do not use "/" or "*" or other special characters

Format: Return only the questions, one per line, without numbering or bullet points."""


def parse_question_lines(text: str) -> list[str]:
    """Split model output into questions, dropping blank and numbered lines."""
    lines = [line.strip() for line in text.split("\n")]
    return [line for line in lines if line and not _NUMBERED_LINE.match(line)][:QUESTION_COUNT]


def generate_questions(
    role: str,
    interview_type: str,
    level: str,
    tech_stack: Sequence[str] = (),
    provider: Optional[LLMProvider] = None,
) -> QuestionSet:
    """
    Generate up to QUESTION_COUNT questions for an interview.

    Short model output is topped up from the static bank.
    """
    tech_stack = list(tech_stack or [])
    provider = provider or get_openai_provider()

    if provider is None:
        return QuestionSet(questions=static_questions(role, interview_type, level, tech_stack), fallback=True)

    try:
        response = provider.chat(
            messages=[{"role": "user", "content": _build_prompt(role, interview_type, level, tech_stack)}],
            model=get_model_for_feature("question_generation"),
            temperature=0.7,
            max_tokens=800,
        )
    except Exception as e:
        logger.error(f"Question generation failed, using static questions: {e}", exc_info=True)
        return QuestionSet(questions=static_questions(role, interview_type, level, tech_stack), fallback=True)

    questions = parse_question_lines(response.content)
    if len(questions) < QUESTION_COUNT:
        needed = QUESTION_COUNT - len(questions)
        questions.extend(static_questions(role, interview_type, level, tech_stack)[:needed])

    logger.info(f"Questions generated: role={role!r}, type={interview_type}, level={level}, count={len(questions)}")
    return QuestionSet(questions=questions)
