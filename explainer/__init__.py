"""
explainer — natural-language explanation of decided pharmacogenomic results.

Components:
  models     — ExplanationContext (frozen input) and Explanation (output)
  llm_engine — timeout-bound OpenAI-compatible explanation call
  fallback   — static templates keyed by gene and risk label
"""

from explainer.fallback import fallback_explanation
from explainer.llm_engine import generate_explanation, parse_explanation
from explainer.models import Explanation, ExplanationContext

__all__ = [
    "Explanation", "ExplanationContext",
    "fallback_explanation", "generate_explanation", "parse_explanation",
]
