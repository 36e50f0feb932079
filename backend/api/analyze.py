"""
api/analyze.py
==============
POST /api/analyze
-----------------
Accepts a multipart/form-data request with:
  • vcfFile : UploadFile (.vcf, size-capped)
  • drugs   : str        (comma-separated drug names, e.g. "Codeine,Warfarin")

Orchestrates one request:

  1. Reject missing / non-.vcf / oversized uploads
  2. Validate the drug list (at least one supported drug)
  3. Structural VCF check (#CHROM header)
  4. Parse VCF → target-gene variants
  5. Per drug: diplotype → phenotype → risk → recommendation (pure pipeline)
  6. Per drug: explanation (LLM, timeout-bound, template fallback)
  7. Serialise to AnalysisResult (single object for one drug, array otherwise)

Steps 1-5 finish before any explanation call starts, so a failed, slow or
cancelled explanation can never change a decided result.

GET  /api/supported-drugs
POST /api/validate-vcf
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from backend.api.errors import bad_request
from backend.config import Settings, get_settings
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
    utc_timestamp,
)
from explainer import ExplanationContext, generate_explanation
from explainer.models import Explanation
from genomics_engine.pgx_reference import SUPPORTED_DRUGS
from genomics_engine.pipeline import DrugAnalysis, analyze_drugs
from genomics_engine.risk_classifier import parse_drug_input
from genomics_engine.vcf_parser import decode_vcf_bytes, parse_vcf, validate_vcf

logger = logging.getLogger(__name__)

router = APIRouter()

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _base36(n: int) -> str:
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits)) or "0"


def new_patient_id() -> str:
    return f"PATIENT_{_base36(int(time.time() * 1000))}"


async def _read_vcf_upload(
    vcf_file: Optional[UploadFile],
    settings: Settings,
    missing_error: str = "No VCF file uploaded",
    **extra: Any,
) -> str:
    if vcf_file is None or not vcf_file.filename:
        raise bad_request(missing_error, **extra)

    if not vcf_file.filename.lower().endswith(".vcf"):
        raise bad_request("Only .vcf files are allowed", **extra)

    raw = await vcf_file.read(settings.max_upload_bytes + 1)
    if len(raw) > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes / (1024 * 1024)
        raise bad_request(f"File size exceeds {limit_mb:g}MB limit", **extra)

    return decode_vcf_bytes(raw)


def _build_result(
    analysis: DrugAnalysis,
    explanation: Explanation,
    patient_id: str,
    timestamp: str,
) -> AnalysisResult:
    return AnalysisResult(
        patient_id = patient_id,
        drug       = analysis.drug,
        timestamp  = timestamp,
        risk_assessment = RiskAssessment(
            risk_label       = analysis.risk.risk_label,
            confidence_score = analysis.risk.confidence_score,
            severity         = analysis.risk.severity,
        ),
        pharmacogenomic_profile = PharmacoGenomicProfile(
            primary_gene      = analysis.gene,
            diplotype         = analysis.diplotype,
            phenotype         = analysis.phenotype,
            detected_variants = [DetectedVariant(rsid=r) for r in analysis.rsids],
        ),
        clinical_recommendation = ClinicalRecommendation(
            action    = analysis.recommendation.action,
            rationale = analysis.recommendation.rationale,
        ),
        llm_generated_explanation = LLMExplanation(
            summary         = explanation.summary,
            mechanism       = explanation.mechanism,
            clinical_impact = explanation.clinical_impact,
        ),
        quality_metrics = QualityMetrics(vcf_parsing_success=True),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

_ERROR_RESPONSES = {400: {"model": ErrorResponse}}


@router.post("/api/analyze", responses=_ERROR_RESPONSES)
async def analyze(
    vcf_file: Optional[UploadFile] = File(None, alias="vcfFile", description="VCF file"),
    drugs: Optional[str] = Form(None, description="Comma-separated drug names"),
    settings: Settings = Depends(get_settings),
):
    """Run the pharmacogenomic risk pipeline for every requested drug."""
    content = await _read_vcf_upload(vcf_file, settings)

    if not drugs or not drugs.strip():
        raise bad_request("Drug name(s) required")

    validations = parse_drug_input(drugs)
    valid_drugs = [v.normalized_name for v in validations if v.valid]
    invalid_drugs = [v.original for v in validations if not v.valid]
    if not valid_drugs:
        raise bad_request(
            "No valid drugs specified",
            invalidDrugs   = invalid_drugs,
            supportedDrugs = list(SUPPORTED_DRUGS),
        )
    if invalid_drugs:
        logger.warning("Skipping unsupported drugs: %s", ", ".join(invalid_drugs))

    validation = validate_vcf(content)
    if not validation.valid:
        raise bad_request(validation.error)

    parsed = await asyncio.to_thread(parse_vcf, content)
    if not parsed.success:
        raise bad_request("Failed to parse VCF file")

    analyses: List[DrugAnalysis] = analyze_drugs(parsed, valid_drugs)

    explanations = await asyncio.gather(*(
        generate_explanation(
            ExplanationContext.build(
                drug       = a.drug,
                gene       = a.gene,
                diplotype  = a.diplotype,
                phenotype  = a.phenotype,
                risk_label = a.risk.risk_label,
                severity   = a.risk.severity,
                rsids      = a.rsids,
            ),
            settings,
        )
        for a in analyses
    ))

    patient_id = new_patient_id()
    timestamp = utc_timestamp()
    results = [
        _build_result(a, e, patient_id, timestamp)
        for a, e in zip(analyses, explanations)
    ]

    logger.info(
        "Analysed %d drug(s) for %s from %d variants",
        len(results), patient_id, parsed.total_variants,
    )

    if len(results) == 1:
        return results[0].model_dump()
    return [r.model_dump() for r in results]


@router.get("/api/supported-drugs")
async def supported_drugs():
    return {"drugs": list(SUPPORTED_DRUGS), "count": len(SUPPORTED_DRUGS)}


@router.post(
    "/api/validate-vcf",
    response_model              = ValidateResponse,
    response_model_exclude_none = True,
    responses                   = _ERROR_RESPONSES,
)
async def validate_vcf_upload(
    vcf_file: Optional[UploadFile] = File(None, alias="vcfFile"),
    settings: Settings = Depends(get_settings),
):
    """Structural check plus per-gene variant counts, without risk analysis."""
    content = await _read_vcf_upload(
        vcf_file, settings, missing_error="No file uploaded", valid=False,
    )

    validation = validate_vcf(content)
    if not validation.valid:
        raise bad_request(validation.error, valid=False)

    parsed = parse_vcf(content)
    return ValidateResponse(
        valid = True,
        stats = VCFStats(
            totalVariants  = parsed.total_variants,
            genesFound     = parsed.genes_found,
            variantsByGene = parsed.variants_by_gene_counts(),
        ),
    )
