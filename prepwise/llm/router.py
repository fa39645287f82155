"""
Model router for selecting the model used by each AI feature.
"""
from prepwise.core.config import QUESTION_MODEL, FEEDBACK_MODEL

DEFAULT_MODEL = "gpt-4o-mini"

# Feature -> model mapping
MODEL_ROUTING = {
    "question_generation": QUESTION_MODEL,
    "feedback": FEEDBACK_MODEL,
}


def get_model_for_feature(feature: str) -> str:
    """
    Get appropriate model for a feature.

    Args:
        feature: Feature name ("question_generation" | "feedback")

    Returns:
        Model identifier string
    """
    return MODEL_ROUTING.get(feature, DEFAULT_MODEL)
