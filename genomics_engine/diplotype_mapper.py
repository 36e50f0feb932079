"""
diplotype_mapper.py
===================
Reduce a gene's annotated variants into a normalized diplotype string.

The input file carries star-allele labels per variant but no phase, so the
diplotype is inferred from label multiplicity:

  1. No variant carries a star label          → *1/*1 (wild-type assumption)
  2. One distinct label seen ≥2 times          → X/X   (homozygous)
  3. One distinct label seen once              → *1/X  (heterozygous vs *1)
  4. Two or more distinct labels               → the two lowest-ranked labels

Alleles are always emitted in rank order (numeric part ascending, then the
full label), so the same unordered pair yields one canonical string no matter
the row order in the file.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from genomics_engine.pgx_reference import (
    TARGET_GENES,
    WILD_TYPE_ALLELE,
    WILD_TYPE_DIPLOTYPE,
)
from genomics_engine.vcf_parser import Variant

logger = logging.getLogger(__name__)

_NON_DIGIT = re.compile(r"[^0-9]")


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DiplotypeResult:
    gene: str
    diplotype: str
    star_alleles: Tuple[str, ...] = ()     # labels observed, file order
    rsids: Tuple[str, ...] = ()
    detected_variants: Tuple[Variant, ...] = field(default_factory=tuple)

    @property
    def has_variants(self) -> bool:
        return bool(self.detected_variants)


# ---------------------------------------------------------------------------
# Allele ordering
# ---------------------------------------------------------------------------

def allele_rank(allele: str) -> Tuple[int, str]:
    """
    Sort key for star-allele labels: ``(numeric portion, label)``.

    The numeric portion is every digit in the label read as one integer
    (``*3A`` → 3, ``*2xN`` → 2); labels without digits rank as 0.
    """
    digits = _NON_DIGIT.sub("", allele)
    return (int(digits) if digits else 0, allele)


def sort_alleles(alleles: Iterable[str]) -> List[str]:
    return sorted(alleles, key=allele_rank)


# ---------------------------------------------------------------------------
# Core function
# ---------------------------------------------------------------------------

def determine_diplotype(variants: Sequence[Variant]) -> str:
    """
    Resolve one gene's variants into a ``<allele>/<allele>`` string.

    Never fails: missing information degrades to ``*1/*1``.
    """
    if not variants:
        return WILD_TYPE_DIPLOTYPE

    stars = [v.star_allele for v in variants if v.star_allele and v.star_allele.startswith("*")]
    if not stars:
        return WILD_TYPE_DIPLOTYPE

    counts = Counter(stars)
    unique = sort_alleles(counts)

    if len(unique) == 1:
        allele = unique[0]
        if counts[allele] >= 2:
            pair = [allele, allele]
        elif allele == WILD_TYPE_ALLELE:
            pair = [WILD_TYPE_ALLELE, WILD_TYPE_ALLELE]
        else:
            pair = [WILD_TYPE_ALLELE, allele]
    else:
        pair = unique[:2]

    first, second = sort_alleles(pair)
    return f"{first}/{second}"


def build_diplotype(gene: str, variants: Sequence[Variant]) -> DiplotypeResult:
    """Wrap ``determine_diplotype`` with the evidence it was built from."""
    diplotype = determine_diplotype(variants)
    result = DiplotypeResult(
        gene              = gene.upper(),
        diplotype         = diplotype,
        star_alleles      = tuple(v.star_allele for v in variants if v.star_allele),
        rsids             = tuple(v.rsid for v in variants if v.rsid),
        detected_variants = tuple(variants),
    )
    logger.debug(
        "Gene %s → diplotype %s from %d variant(s)",
        result.gene, diplotype, len(variants),
    )
    return result


def build_diplotypes(
    gene_variants: Mapping[str, Sequence[Variant]],
    genes: Sequence[str] = TARGET_GENES,
) -> Dict[str, DiplotypeResult]:
    """
    Build a diplotype for every requested gene.

    Genes with no entry in ``gene_variants`` resolve to ``*1/*1``.
    """
    return {
        gene: build_diplotype(gene, gene_variants.get(gene, ()))
        for gene in genes
    }
