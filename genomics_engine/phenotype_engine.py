"""
phenotype_engine.py
===================
Translate (gene, diplotype) into a CPIC metabolizer phenotype code.

Lookup order:
  1. Missing gene / diplotype, or diplotype ``Unknown``   → Unknown
  2. Gene-scoped static table, normalized diplotype        → table value
  3. Same table, reversed allele order                     → table value
  4. SLCO1B1 / DPYD only — additive activity score:
       both allele scores known, total = s1 + s2
         total ≥ 2      → NM
         1 ≤ total < 2  → IM
         total < 1      → PM
  5. Anything else                                          → Unknown

CYP2C19, CYP2D6, CYP2C9 and TPMT never reach step 4: their tables encode
guideline exceptions (CYP2C19 *2/*17 is IM, not RM) that an additive model
would get wrong.  An allele with no known score is never defaulted to 0.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from genomics_engine.diplotype_mapper import sort_alleles
from genomics_engine.pgx_reference import (
    ACTIVITY_SCORE_GENES,
    ALLELE_FUNCTION_SCORES,
    GENE_PHENOTYPE_TABLES,
    IM,
    NM,
    PHENOTYPE_DESCRIPTIONS,
    PM,
    UNKNOWN,
    UNKNOWN_DIPLOTYPE,
    VALID_PHENOTYPES,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def normalize_diplotype(diplotype: Optional[str]) -> str:
    """
    Return the rank-ordered form of ``diplotype``.

    Idempotent.  Strings that do not split into exactly two alleles are
    returned unchanged; empty input becomes ``Unknown``.
    """
    if not diplotype or diplotype == UNKNOWN_DIPLOTYPE:
        return UNKNOWN_DIPLOTYPE

    parts = [p.strip() for p in diplotype.split("/")]
    if len(parts) != 2:
        return diplotype

    first, second = sort_alleles(parts)
    return f"{first}/{second}"


def _split(diplotype: str) -> Optional[Tuple[str, str]]:
    parts = diplotype.split("/")
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


def activity_score(gene: str, allele1: str, allele2: str) -> Optional[float]:
    """Sum of both allele function scores, or None if either is unscored."""
    scores = ALLELE_FUNCTION_SCORES.get(gene)
    if scores is None:
        return None
    score1 = scores.get(allele1)
    score2 = scores.get(allele2)
    if score1 is None or score2 is None:
        return None
    return score1 + score2


def score_to_phenotype(total: float) -> str:
    if total >= 2:
        return NM
    if total >= 1:
        return IM
    return PM


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def determine_phenotype(gene: Optional[str], diplotype: Optional[str]) -> str:
    """
    Classify ``diplotype`` for ``gene``.

    Parameters
    ----------
    gene      : pharmacogene symbol, e.g. "CYP2C19" (case-insensitive)
    diplotype : e.g. "*2/*17"; either allele order is accepted

    Returns
    -------
    One of PM, IM, NM, RM, UM or Unknown.
    """
    if not gene or not diplotype or diplotype == UNKNOWN_DIPLOTYPE:
        return UNKNOWN

    gene_key = gene.strip().upper()
    normalized = normalize_diplotype(diplotype)

    table = GENE_PHENOTYPE_TABLES.get(gene_key)
    if table is None:
        logger.debug("No phenotype table for gene %s", gene_key)
        return UNKNOWN

    phenotype = table.get(normalized)
    if phenotype is not None:
        logger.debug("%s %s → %s (table)", gene_key, normalized, phenotype)
        return phenotype

    alleles = _split(normalized)
    if alleles is not None:
        reversed_key = f"{alleles[1]}/{alleles[0]}"
        phenotype = table.get(reversed_key)
        if phenotype is not None:
            logger.debug("%s %s → %s (table, reversed)", gene_key, normalized, phenotype)
            return phenotype

        if gene_key in ACTIVITY_SCORE_GENES:
            total = activity_score(gene_key, *alleles)
            if total is not None:
                phenotype = score_to_phenotype(total)
                logger.debug(
                    "%s %s → %s (activity score %.2f)",
                    gene_key, normalized, phenotype, total,
                )
                return phenotype

    logger.info("No phenotype rule for %s %s; reporting Unknown", gene_key, normalized)
    return UNKNOWN


def phenotype_description(phenotype: Optional[str]) -> str:
    """Long name for a phenotype code, e.g. 'PM' → 'Poor Metabolizer'."""
    return PHENOTYPE_DESCRIPTIONS.get(phenotype or UNKNOWN, PHENOTYPE_DESCRIPTIONS[UNKNOWN])


def is_valid_phenotype_for_gene(gene: str, phenotype: str) -> bool:
    allowed = VALID_PHENOTYPES.get((gene or "").upper(), frozenset({UNKNOWN}))
    return phenotype in allowed
