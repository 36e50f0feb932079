"""
fallback.py
===========
Static explanation templates used whenever the LLM is unavailable, slow or
fails.  Built only from values the rule engine already decided.
"""

from __future__ import annotations

from typing import Dict

from explainer.models import Explanation, ExplanationContext

# gene → (summary template, mechanism template)
_GENE_TEMPLATES: Dict[str, tuple] = {
    "CYP2D6": (
        "CYP2D6 {phenotype} status results in {risk_label} assessment for {drug} "
        "due to altered codeine-to-morphine conversion.",
        "The {diplotype} diplotype results in {phenotype} enzyme activity, "
        "affecting codeine-to-morphine conversion.",
    ),
    "CYP2C19": (
        "CYP2C19 {phenotype} status results in {risk_label} assessment for {drug} "
        "due to altered prodrug activation.",
        "The {diplotype} diplotype results in {phenotype} enzyme activity, "
        "affecting clopidogrel activation.",
    ),
    "CYP2C9": (
        "CYP2C9 {phenotype} status results in {risk_label} assessment for {drug} "
        "due to altered drug clearance.",
        "The {diplotype} diplotype results in {phenotype} enzyme activity, "
        "affecting warfarin metabolism.",
    ),
    "SLCO1B1": (
        "SLCO1B1 {phenotype} function results in {risk_label} assessment for {drug} "
        "due to altered hepatic uptake.",
        "Variants in SLCO1B1 alter hepatic uptake of simvastatin, increasing "
        "systemic exposure.",
    ),
    "TPMT": (
        "TPMT {phenotype} status results in {risk_label} assessment for {drug} "
        "due to altered thiopurine metabolism.",
        "The {diplotype} diplotype results in {phenotype} enzyme activity, "
        "affecting thiopurine metabolism.",
    ),
    "DPYD": (
        "DPYD {phenotype} status results in {risk_label} assessment for {drug} "
        "due to altered fluoropyrimidine clearance.",
        "The {diplotype} diplotype results in {phenotype} enzyme activity, "
        "affecting fluorouracil clearance.",
    ),
}

_GENERIC_TEMPLATES = (
    "{gene} {phenotype} status results in {risk_label} assessment for {drug}.",
    "The {diplotype} diplotype indicates {phenotype} enzyme/transporter activity.",
)

_IMPACT_BY_RISK: Dict[str, str] = {
    "Safe": (
        "Standard {drug} dosing should be effective with typical safety profile "
        "for {phenotype} patients."
    ),
    "Adjust Dosage": (
        "{phenotype} status requires dose adjustment for {drug} to optimize "
        "therapeutic effect and minimize adverse effects per CPIC guidelines."
    ),
    "Toxic": (
        "{phenotype} status significantly increases toxicity risk with {drug}. "
        "Alternative therapy or major dose reduction strongly recommended."
    ),
    "Ineffective": (
        "{phenotype} status leads to reduced or no therapeutic effect with {drug}. "
        "Alternative medication recommended."
    ),
    "Unknown": (
        "Unknown metabolizer status requires additional clinical assessment for {drug}."
    ),
}

_GENERIC_IMPACT = "{risk_label} assessment requires appropriate clinical management for {drug}."


def clinical_impact(context: ExplanationContext) -> str:
    template = _IMPACT_BY_RISK.get(context.risk_label, _IMPACT_BY_RISK["Unknown"])
    return template.format(**context.template_values())


def fallback_explanation(context: ExplanationContext) -> Explanation:
    """Template explanation keyed by gene and risk label."""
    values = context.template_values()
    if context.gene in _GENE_TEMPLATES:
        summary_t, mechanism_t = _GENE_TEMPLATES[context.gene]
        impact = clinical_impact(context)
    else:
        summary_t, mechanism_t = _GENERIC_TEMPLATES
        impact = _GENERIC_IMPACT.format(**values)

    return Explanation(
        summary         = summary_t.format(**values),
        mechanism       = mechanism_t.format(**values),
        clinical_impact = impact,
        source          = "fallback",
    )
