"""
risk_classifier.py
==================
Map (drug, phenotype) → RiskAssessment, then RiskAssessment → deterministic
ClinicalRecommendation.

Fallbacks (never raise, never extrapolate):
  • unsupported drug                         → Unknown, confidence 0.0
  • missing / Unknown phenotype              → Unknown, confidence 0.50
  • phenotype with no entry for that drug    → Unknown, confidence 0.50

Severity is always re-derived from SEVERITY_BY_LABEL after the table lookup;
the severity stored alongside each table entry is ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from genomics_engine.pgx_reference import (
    CLINICAL_ACTIONS,
    DRUG_GENE_MAP,
    DRUG_RATIONALES,
    DRUG_RISK_TABLES,
    RISK_ADJUST,
    RISK_INEFFECTIVE,
    RISK_SAFE,
    RISK_TOXIC,
    RISK_UNKNOWN,
    SEVERITY_BY_LABEL,
    SEVERITY_LOW,
    SUPPORTED_DRUGS,
    UNKNOWN,
)

logger = logging.getLogger(__name__)

_UNKNOWN_PHENOTYPE_CONFIDENCE = 0.50
_UNSUPPORTED_DRUG_CONFIDENCE = 0.0


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RiskAssessment:
    risk_label: str
    confidence_score: float
    severity: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "risk_label":       self.risk_label,
            "confidence_score": round(self.confidence_score, 2),
            "severity":         self.severity,
        }


@dataclass(frozen=True)
class ClinicalRecommendation:
    action: str
    rationale: str


@dataclass(frozen=True)
class DrugValidation:
    original: str
    valid: bool
    normalized_name: Optional[str] = None
    error: Optional[str] = None
    supported_drugs: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CompleteRiskAssessment:
    drug: str
    gene: Optional[str]
    diplotype: str
    phenotype: str
    risk_assessment: RiskAssessment
    clinical_recommendation: ClinicalRecommendation

    @property
    def explanation_context(self) -> Dict[str, Any]:
        """Read-only values handed to the explanation generator."""
        return {
            "gene":       self.gene,
            "diplotype":  self.diplotype,
            "phenotype":  self.phenotype,
            "drug":       self.drug,
            "risk_label": self.risk_assessment.risk_label,
            "severity":   self.risk_assessment.severity,
        }


def _unknown(confidence: float) -> RiskAssessment:
    return RiskAssessment(RISK_UNKNOWN, confidence, SEVERITY_LOW)


def _normalize_drug(drug: Optional[str]) -> str:
    return (drug or "").strip().upper()


# ---------------------------------------------------------------------------
# Drug input handling
# ---------------------------------------------------------------------------

def validate_drug(drug_name: Optional[str]) -> DrugValidation:
    if not drug_name or not isinstance(drug_name, str) or not drug_name.strip():
        return DrugValidation(original=drug_name or "", valid=False, error="Drug name is required")

    normalized = _normalize_drug(drug_name)
    if normalized not in DRUG_GENE_MAP:
        return DrugValidation(
            original        = drug_name,
            valid           = False,
            error           = (
                f"Unsupported drug: {drug_name}. "
                f"Supported drugs: {', '.join(SUPPORTED_DRUGS)}"
            ),
            supported_drugs = list(SUPPORTED_DRUGS),
        )
    return DrugValidation(original=drug_name, valid=True, normalized_name=normalized)


def parse_drug_input(drug_input: Optional[str]) -> List[DrugValidation]:
    """Validate each entry of a comma-separated drug list, in order."""
    if not drug_input or not isinstance(drug_input, str):
        return []
    names = [d.strip().upper() for d in drug_input.split(",")]
    return [validate_drug(name) for name in names if name]


def primary_gene(drug: Optional[str]) -> Optional[str]:
    return DRUG_GENE_MAP.get(_normalize_drug(drug))


# ---------------------------------------------------------------------------
# Risk calculation
# ---------------------------------------------------------------------------

def calculate_risk(
    drug: Optional[str],
    phenotype: Optional[str],
    has_variants: bool = False,
) -> RiskAssessment:
    """
    Classify pharmacogenomic risk for a drug given the patient's phenotype.

    Parameters
    ----------
    drug         : drug name, case-insensitive (aliases such as "5-FU" accepted)
    phenotype    : phenotype code (PM, IM, NM, RM, UM, Unknown)
    has_variants : whether any variant was detected for the drug's gene;
                   accepted for the caller's record, does not change the result

    Returns
    -------
    RiskAssessment whose severity always matches SEVERITY_BY_LABEL.
    """
    drug_key = _normalize_drug(drug)
    rules = DRUG_RISK_TABLES.get(drug_key)

    if rules is None:
        logger.info("Unsupported drug %r; risk Unknown", drug)
        return _unknown(_UNSUPPORTED_DRUG_CONFIDENCE)

    if not phenotype or phenotype == UNKNOWN:
        return _unknown(_UNKNOWN_PHENOTYPE_CONFIDENCE)

    rule = rules.get(phenotype)
    if rule is None:
        logger.info("No %s rule for phenotype %s; risk Unknown", drug_key, phenotype)
        return _unknown(_UNKNOWN_PHENOTYPE_CONFIDENCE)

    severity = SEVERITY_BY_LABEL.get(rule.risk, SEVERITY_LOW)
    if severity != rule.severity:
        logger.debug(
            "Table severity %r for %s/%s replaced by canonical %r",
            rule.severity, drug_key, phenotype, severity,
        )

    return RiskAssessment(
        risk_label       = rule.risk,
        confidence_score = rule.confidence,
        severity         = severity,
    )


# ---------------------------------------------------------------------------
# Clinical recommendation
# ---------------------------------------------------------------------------

_GENERIC_RATIONALES = {
    RISK_SAFE: (
        "{phenotype} phenotype for {gene} indicates standard {drug} metabolism. "
        "No dose adjustment required."
    ),
    RISK_ADJUST: (
        "{phenotype} phenotype for {gene} indicates altered {drug} metabolism. "
        "Dose modification per CPIC guidelines recommended."
    ),
    RISK_TOXIC: (
        "{phenotype} phenotype for {gene} indicates significantly altered "
        "metabolism with high toxicity risk for {drug}."
    ),
    RISK_INEFFECTIVE: (
        "{phenotype} phenotype for {gene} indicates reduced drug activation, "
        "leading to therapeutic failure with {drug}."
    ),
}

_CATCH_ALL_RATIONALE = (
    "Unable to determine {gene} metabolizer status. Clinical monitoring "
    "recommended before {drug} administration."
)


def clinical_recommendation(
    risk_label: str,
    drug: Optional[str],
    phenotype: Optional[str],
) -> ClinicalRecommendation:
    """Deterministic action + rationale for an already-decided risk label."""
    drug_key = _normalize_drug(drug)
    action = CLINICAL_ACTIONS.get(risk_label, CLINICAL_ACTIONS[RISK_UNKNOWN])

    rationale = DRUG_RATIONALES.get(drug_key, {}).get(risk_label)
    if rationale is None:
        template = _GENERIC_RATIONALES.get(risk_label, _CATCH_ALL_RATIONALE)
        rationale = template.format(
            phenotype = phenotype or UNKNOWN,
            gene      = DRUG_GENE_MAP.get(drug_key, "relevant gene"),
            drug      = drug_key,
        )

    return ClinicalRecommendation(action=action, rationale=rationale)


def complete_risk_assessment(
    drug: str,
    gene: Optional[str],
    diplotype: str,
    phenotype: str,
    has_variants: bool = False,
) -> CompleteRiskAssessment:
    drug_key = _normalize_drug(drug)
    risk = calculate_risk(drug_key, phenotype, has_variants)
    return CompleteRiskAssessment(
        drug                    = drug_key,
        gene                    = gene,
        diplotype               = diplotype,
        phenotype               = phenotype,
        risk_assessment         = risk,
        clinical_recommendation = clinical_recommendation(risk.risk_label, drug_key, phenotype),
    )
