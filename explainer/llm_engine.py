"""
llm_engine.py
=============
Natural-language explanation of an already-decided risk assessment, via an
OpenAI-compatible chat completion endpoint.

The LLM explains; it never decides.  It receives the final drug, gene,
diplotype, phenotype, risk label and severity and is asked for three short
sections (summary, mechanism, clinical impact).  Its output is never read back
into the risk assessment.

Every call is bounded by ``Settings.llm_timeout_seconds``.  Missing
configuration, authorization errors, timeouts and client errors all degrade to
``fallback.fallback_explanation``; request cancellation propagates.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional

from backend.config import Settings, get_settings
from explainer.fallback import fallback_explanation
from explainer.models import Explanation, ExplanationContext

logger = logging.getLogger(__name__)


class LLMUnavailableError(RuntimeError):
    """Raised internally when the LLM produced no usable output."""


def _is_auth_error(exc: Exception) -> bool:
    status_code = getattr(exc, "status_code", None)
    if status_code in (401, 403):
        return True

    response = getattr(exc, "response", None)
    if response is not None and getattr(response, "status_code", None) in (401, 403):
        return True

    text = str(exc).lower()
    return "401" in text or "403" in text or "unauthor" in text or "forbidden" in text


# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

_SYSTEM_PROMPT = (
    "You are a clinical pharmacogenomics expert. Your role is to EXPLAIN "
    "pre-determined clinical decisions based on CPIC guidelines. Never "
    "contradict the provided risk assessment - only explain why it is "
    "appropriate. Focus on clinical relevance and actionable information."
)

_USER_PROMPT_TEMPLATE = """You are explaining a pharmacogenomic analysis result. The following has been determined by CPIC-aligned clinical rules:

PATIENT DATA:
- Gene: {gene}
- Diplotype: {diplotype}
- Phenotype: {phenotype} (rule-based determination)
- Variants detected: {rsids}

CLINICAL DECISION (pre-determined by CPIC rules):
- Drug: {drug}
- Risk Assessment: {risk_label}
- Severity: {severity}

Your task is to EXPLAIN why this {risk_label} assessment is clinically appropriate for a {phenotype} patient taking {drug}. Do NOT contradict or change the pre-determined risk assessment.

Provide:
1. Summary: One sentence explaining the drug-gene interaction and the {risk_label} classification
2. Mechanism: How {phenotype} status specifically affects {drug} metabolism/action (2-3 sentences)
3. Clinical Impact: What {risk_label} means for this patient's treatment (2-3 sentences)

Be concise and clinically accurate."""


def build_messages(context: ExplanationContext) -> List[Dict[str, str]]:
    values = context.template_values()
    values["rsids"] = ", ".join(context.rsids) or "None detected"
    return [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": _USER_PROMPT_TEMPLATE.format(**values)},
    ]


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------

_SECTION_KEYS = {
    "1": "summary",
    "2": "mechanism",
    "3": "clinical_impact",
    "summary": "summary",
    "mechanism": "mechanism",
    "clinical impact": "clinical_impact",
}

_NUMBERED = re.compile(
    r"^\s*(?:\*\*)?([1-3])[.)]\s*(?:\*\*)?"
    r"(?:(summary|mechanism|clinical impact)\s*(?:\*\*)?\s*:?\s*(?:\*\*)?)?\s*(.*)$",
    re.IGNORECASE,
)
_LABELLED = re.compile(
    r"^\s*(?:\*\*)?(summary|mechanism|clinical impact)\s*(?:\*\*)?\s*:\s*(?:\*\*)?\s*(.*)$",
    re.IGNORECASE,
)
_SENTENCE_END = re.compile(r"[.!?]+")


def _sections(content: str) -> Dict[str, str]:
    found: Dict[str, List[str]] = {}
    current: Optional[str] = None

    for line in content.splitlines():
        numbered = _NUMBERED.match(line)
        labelled = None if numbered else _LABELLED.match(line)
        if numbered:
            label = numbered.group(2)
            current = _SECTION_KEYS[label.lower() if label else numbered.group(1)]
            text = numbered.group(3)
        elif labelled:
            current = _SECTION_KEYS[labelled.group(1).lower()]
            text = labelled.group(2)
        elif current is not None:
            text = line
        else:
            continue
        found.setdefault(current, []).append(text.strip())

    return {key: " ".join(p for p in parts if p).strip() for key, parts in found.items()}


def parse_explanation(content: str, context: ExplanationContext) -> Explanation:
    """
    Split LLM text into the three explanation fields.

    Numbered (``1.``) or labelled (``Summary:``) sections are recognised;
    unstructured text is split by sentence instead.
    """
    sections = _sections(content)
    summary = sections.get("summary", "")
    mechanism = sections.get("mechanism", "")
    impact = sections.get("clinical_impact", "")

    drug, gene = context.drug, context.gene
    phenotype, risk_label = context.phenotype, context.risk_label

    if not (summary or mechanism or impact):
        sentences = [s.strip() for s in _SENTENCE_END.split(content) if s.strip()]
        summary = sentences[0] if sentences else (
            f"{gene} affects {drug} metabolism, resulting in {risk_label} assessment."
        )
        mechanism = sentences[1] if len(sentences) > 1 else (
            f"Genetic variation in {gene} alters drug processing."
        )
        impact = ". ".join(sentences[2:]) or (
            f"{phenotype} phenotype with {risk_label} risk requires clinical consideration."
        )

    return Explanation(
        summary         = summary or f"{gene} genetic variation affects {drug} metabolism.",
        mechanism       = mechanism or f"The {gene} gene encodes an enzyme involved in {drug} metabolism.",
        clinical_impact = impact or f"Patients with {phenotype} phenotype may experience altered drug response.",
        source          = "llm",
    )


# ---------------------------------------------------------------------------
# LLM call
# ---------------------------------------------------------------------------

def _make_client(settings: Settings) -> Any:
    from openai import AsyncOpenAI  # type: ignore

    return AsyncOpenAI(
        base_url    = settings.openai_base_url,
        api_key     = settings.openai_api_key,
        timeout     = settings.llm_timeout_seconds,
        max_retries = 0,
    )


async def _complete(client: Any, context: ExplanationContext, settings: Settings) -> str:
    response = await client.chat.completions.create(
        model       = settings.openai_model,
        messages    = build_messages(context),
        temperature = settings.llm_temperature,
        max_tokens  = settings.llm_max_tokens,
    )
    choices = getattr(response, "choices", None) or []
    content = choices[0].message.content if choices and choices[0].message else None
    if not content or not content.strip():
        raise LLMUnavailableError(f"{settings.openai_model}: empty response")
    return content


async def generate_explanation(
    context: ExplanationContext,
    settings: Optional[Settings] = None,
    client: Any = None,
) -> Explanation:
    """
    Explain ``context`` with the configured LLM, or fall back to templates.

    Parameters
    ----------
    context  : decided values for one drug; never modified
    settings : defaults to ``get_settings()``
    client   : an ``AsyncOpenAI``-compatible client; built from settings
               and closed after the call when omitted

    Returns
    -------
    Explanation with ``source`` "llm" or "fallback".
    """
    settings = settings or get_settings()

    owns_client = client is None
    if owns_client:
        if not settings.llm_enabled:
            logger.debug("LLM not configured; using template explanation for %s", context.drug)
            return fallback_explanation(context)
        client = _make_client(settings)

    try:
        content = await asyncio.wait_for(
            _complete(client, context, settings),
            timeout=settings.llm_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.warning(
            "LLM explanation for %s timed out after %.1fs; using fallback.",
            context.drug, settings.llm_timeout_seconds,
        )
        return fallback_explanation(context)
    except LLMUnavailableError as exc:
        logger.warning("LLM returned no usable output (%s); using fallback.", exc)
        return fallback_explanation(context)
    except Exception as exc:
        if _is_auth_error(exc):
            logger.warning("LLM authorization failed (%s); using fallback.", exc)
        else:
            logger.error("LLM call failed: %s", exc, exc_info=True)
        return fallback_explanation(context)
    finally:
        if owns_client:
            await client.close()

    return parse_explanation(content, context)
