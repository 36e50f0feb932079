"""
vcf_parser.py
=============
Extract pharmacogenomic variants from the text of an annotated VCF file.

Expected layout (VCFv4.x, tab-delimited):
  - ``##`` lines           — metadata, ignored
  - one ``#CHROM`` line    — column header; names are matched upper-cased
  - data rows              — INFO column carries ``KEY=value`` pairs, e.g.
                             ``GENE=CYP2C19;RS=rs4244285;STAR=*2``

Only rows whose ``GENE`` annotation is one of the target pharmacogenes are
kept.  Star-allele labels and rsIDs are taken from the annotations; the file's
variant calls are trusted as-is (no phasing, no genotype QC).

The parser never raises on malformed rows: they are skipped.  A file without
a ``#CHROM`` line yields ``success=False`` and an empty result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from genomics_engine.pgx_reference import TARGET_GENES

logger = logging.getLogger(__name__)

_META_PREFIX = "##"
_HEADER_PREFIX = "#CHROM"


class VCFStructureError(ValueError):
    """Raised when VCF content lacks a required structural marker."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Variant:
    chrom: str
    pos: str
    variant_id: str    # ID column, '.' when absent
    ref: str
    alt: str
    gene: str          # upper-cased gene symbol
    rsid: str          # RS / RSID annotation, else ID column, else ''
    star_allele: str   # STAR annotation, '' when absent

    @property
    def has_star_allele(self) -> bool:
        return bool(self.star_allele)


@dataclass(frozen=True)
class VCFParseResult:
    success: bool
    variants: Tuple[Variant, ...] = ()
    gene_variants: Mapping[str, Tuple[Variant, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    target_genes: Tuple[str, ...] = TARGET_GENES

    @property
    def total_variants(self) -> int:
        return len(self.variants)

    @property
    def genes_found(self) -> List[str]:
        return list(self.gene_variants.keys())

    def variants_for(self, gene: str) -> Tuple[Variant, ...]:
        return self.gene_variants.get(gene.upper(), ())

    def variants_by_gene_counts(self) -> Dict[str, int]:
        return {gene: len(vs) for gene, vs in self.gene_variants.items()}


@dataclass(frozen=True)
class VCFValidation:
    valid: bool
    error: Optional[str] = None
    has_metadata: bool = False


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def parse_info(info_str: Optional[str]) -> Dict[str, str]:
    """
    Parse a semicolon-separated INFO field into ``{lowercase key: value}``.

    Pairs missing either a key or a value (``GENE=``, ``=x``, flags such as
    ``DB``) are dropped.
    """
    result: Dict[str, str] = {}
    if not info_str or info_str == ".":
        return result
    for token in info_str.split(";"):
        parts = token.split("=")
        key = parts[0]
        value = parts[1] if len(parts) > 1 else ""
        if key and value:
            result[key.lower()] = value
    return result


def _column(fields: Sequence[str], columns: Mapping[str, int], name: str, default: str = "") -> str:
    idx = columns.get(name)
    if idx is None or idx >= len(fields):
        return default
    return fields[idx] or default


def decode_vcf_bytes(raw: bytes) -> str:
    """Decode uploaded VCF bytes; undecodable bytes are replaced."""
    return raw.decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_vcf(
    content: str,
    target_genes: Sequence[str] = TARGET_GENES,
) -> VCFParseResult:
    """
    Parse VCF text and return target-gene variants, flat and grouped by gene.

    Parameters
    ----------
    content      : full text of the VCF file
    target_genes : gene allow-list (defaults to the six supported genes)

    Returns
    -------
    VCFParseResult.  ``success`` is True iff a ``#CHROM`` header was found;
    rows appearing before the header are ignored.
    """
    allowed = tuple(g.upper() for g in target_genes)
    if not isinstance(content, str) or not content:
        return VCFParseResult(success=False, target_genes=allowed)

    columns: Dict[str, int] = {}
    header_found = False
    variants: List[Variant] = []
    grouped: Dict[str, List[Variant]] = {}
    skipped = 0

    for raw_line in content.split("\n"):
        line = raw_line.rstrip("\r")

        if line.startswith(_META_PREFIX):
            continue

        if line.startswith(_HEADER_PREFIX):
            if not header_found:
                header_found = True
                headers = line[1:].split("\t")
                columns = {name.strip().upper(): idx for idx, name in enumerate(headers)}
            continue

        if not line.strip() or not header_found:
            continue

        fields = line.split("\t")
        info_idx = columns.get("INFO")
        if info_idx is None or len(fields) <= info_idx:
            skipped += 1
            continue

        info = parse_info(fields[info_idx])
        gene = info.get("gene", "").upper()
        if gene not in allowed:
            continue

        row_id = _column(fields, columns, "ID", ".")
        variant = Variant(
            chrom       = _column(fields, columns, "CHROM"),
            pos         = _column(fields, columns, "POS"),
            variant_id  = row_id,
            ref         = _column(fields, columns, "REF"),
            alt         = _column(fields, columns, "ALT"),
            gene        = gene,
            rsid        = info.get("rs") or info.get("rsid") or _column(fields, columns, "ID"),
            star_allele = info.get("star", ""),
        )
        variants.append(variant)
        grouped.setdefault(gene, []).append(variant)

    if not header_found:
        logger.warning("No #CHROM header line found; returning empty parse result.")
        return VCFParseResult(success=False, target_genes=allowed)

    logger.info(
        "Parsed %d pharmacogenomic variants across genes %s (%d short rows skipped)",
        len(variants), sorted(grouped), skipped,
    )
    return VCFParseResult(
        success       = True,
        variants      = tuple(variants),
        gene_variants = MappingProxyType({g: tuple(vs) for g, vs in grouped.items()}),
        target_genes  = allowed,
    )


def validate_vcf(content: object) -> VCFValidation:
    """
    Quick structural check run before full parsing.

    Does not influence ``parse_vcf``; callers decide whether to stop on an
    invalid result.
    """
    if not isinstance(content, str) or not content:
        return VCFValidation(valid=False, error="Empty or invalid file content")

    has_metadata = False
    for line in content.split("\n"):
        if line.startswith(_HEADER_PREFIX):
            return VCFValidation(valid=True, has_metadata=has_metadata)
        if line.startswith(_META_PREFIX):
            has_metadata = True

    return VCFValidation(
        valid=False,
        error="Missing VCF header line (#CHROM)",
        has_metadata=has_metadata,
    )


def require_valid_vcf(content: object) -> None:
    """Raise ``VCFStructureError`` if ``validate_vcf`` rejects the content."""
    validation = validate_vcf(content)
    if not validation.valid:
        raise VCFStructureError(validation.error)
