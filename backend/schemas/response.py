"""
schemas/response.py
===================
Pydantic v2 models for the /api/analyze result object and error bodies.

One AnalysisResult is produced per requested drug.  Values are copied from
the already-decided pipeline output; nothing here recomputes them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------

class DetectedVariant(BaseModel):
    rsid: str


class RiskAssessment(BaseModel):
    risk_label: Literal["Safe", "Adjust Dosage", "Toxic", "Ineffective", "Unknown"]
    confidence_score: float = Field(ge=0.0, le=1.0)
    severity: Literal["none", "low", "moderate", "high", "critical"]

    @field_validator("confidence_score", mode="after")
    @classmethod
    def _two_decimals(cls, v: float) -> float:
        return round(v, 2)


class PharmacoGenomicProfile(BaseModel):
    primary_gene: Optional[str]
    diplotype: str
    phenotype: str
    detected_variants: List[DetectedVariant] = Field(default_factory=list)


class ClinicalRecommendation(BaseModel):
    action: str
    rationale: str


class LLMExplanation(BaseModel):
    summary: str
    mechanism: str
    clinical_impact: str


class QualityMetrics(BaseModel):
    vcf_parsing_success: bool


# ---------------------------------------------------------------------------
# Top-level response
# ---------------------------------------------------------------------------

class AnalysisResult(BaseModel):
    patient_id: str
    drug: str
    timestamp: str = Field(default_factory=utc_timestamp)
    risk_assessment: RiskAssessment
    pharmacogenomic_profile: PharmacoGenomicProfile
    clinical_recommendation: ClinicalRecommendation
    llm_generated_explanation: LLMExplanation
    quality_metrics: QualityMetrics

    @field_validator("timestamp", mode="before")
    @classmethod
    def _ensure_utc_string(cls, v: Any) -> str:
        if isinstance(v, datetime):
            return v.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return str(v)


# ---------------------------------------------------------------------------
# Validate-only and error responses
# ---------------------------------------------------------------------------

class VCFStats(BaseModel):
    totalVariants: int
    genesFound: List[str]
    variantsByGene: dict


class ValidateResponse(BaseModel):
    valid: bool
    stats: Optional[VCFStats] = None
    error: Optional[str] = None



class ErrorResponse(BaseModel):
    error: str
    valid: Optional[bool] = None
    invalidDrugs: Optional[List[str]] = None
    supportedDrugs: Optional[List[str]] = None
