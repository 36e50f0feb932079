"""
pipeline.py
===========
Per-drug run of the four genomics stages:

  VCFParseResult → gene variants → diplotype → phenotype → risk + recommendation

Each call is pure: it reads the parse result and the shared reference
tables, writes nothing, and returns one immutable DrugAnalysis.  Requests can
run it concurrently without coordination.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from genomics_engine.diplotype_mapper import DiplotypeResult, build_diplotype
from genomics_engine.pgx_reference import UNKNOWN, UNKNOWN_DIPLOTYPE
from genomics_engine.phenotype_engine import determine_phenotype
from genomics_engine.risk_classifier import (
    ClinicalRecommendation,
    RiskAssessment,
    calculate_risk,
    clinical_recommendation,
    primary_gene,
)
from genomics_engine.vcf_parser import Variant, VCFParseResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DrugAnalysis:
    drug: str
    gene: Optional[str]
    diplotype: str
    phenotype: str
    risk: RiskAssessment
    recommendation: ClinicalRecommendation
    variants: Tuple[Variant, ...] = ()

    @property
    def rsids(self) -> List[str]:
        return [v.rsid for v in self.variants]

    @property
    def has_variants(self) -> bool:
        return bool(self.variants)


def analyze_drug(parsed: VCFParseResult, drug: str) -> DrugAnalysis:
    """Run the resolver, classifier and risk engine for one drug."""
    drug_key = drug.strip().upper()
    gene = primary_gene(drug_key)

    if gene is None:
        diplo = DiplotypeResult(gene="", diplotype=UNKNOWN_DIPLOTYPE)
        phenotype = UNKNOWN
    else:
        diplo = build_diplotype(gene, parsed.variants_for(gene))
        phenotype = determine_phenotype(gene, diplo.diplotype)

    risk = calculate_risk(drug_key, phenotype, diplo.has_variants)
    recommendation = clinical_recommendation(risk.risk_label, drug_key, phenotype)

    logger.info(
        "%s: gene=%s diplotype=%s phenotype=%s risk=%s (%s)",
        drug_key, gene, diplo.diplotype, phenotype, risk.risk_label, risk.severity,
    )

    return DrugAnalysis(
        drug           = drug_key,
        gene           = gene,
        diplotype      = diplo.diplotype,
        phenotype      = phenotype,
        risk           = risk,
        recommendation = recommendation,
        variants       = diplo.detected_variants,
    )


def analyze_drugs(parsed: VCFParseResult, drugs: Sequence[str]) -> List[DrugAnalysis]:
    return [analyze_drug(parsed, drug) for drug in drugs]
