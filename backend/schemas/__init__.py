# backend/schemas/__init__.py
from backend.schemas.response import (
    AnalysisResult,
    ClinicalRecommendation,
    DetectedVariant,
    ErrorResponse,
    LLMExplanation,
    PharmacoGenomicProfile,
    QualityMetrics,
    RiskAssessment,
    ValidateResponse,
    VCFStats,
)

__all__ = [
    "AnalysisResult", "ErrorResponse", "DetectedVariant",
    "RiskAssessment", "PharmacoGenomicProfile", "ClinicalRecommendation",
    "LLMExplanation", "QualityMetrics", "ValidateResponse", "VCFStats",
]
