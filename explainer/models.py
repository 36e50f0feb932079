"""
models.py
=========
Value objects exchanged with the explanation generator.  The context is
frozen so nothing downstream can rewrite a decided risk label or severity.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Tuple


@dataclass(frozen=True)
class ExplanationContext:
    drug: str
    gene: str
    diplotype: str
    phenotype: str
    risk_label: str
    severity: str
    rsids: Tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        drug: str,
        gene: str,
        diplotype: str,
        phenotype: str,
        risk_label: str,
        severity: str,
        rsids: Iterable[str] = (),
    ) -> "ExplanationContext":
        return cls(
            drug=drug, gene=gene or "Unknown", diplotype=diplotype,
            phenotype=phenotype, risk_label=risk_label, severity=severity,
            rsids=tuple(r for r in rsids if r),
        )

    def template_values(self) -> Dict[str, str]:
        return {
            "drug":       self.drug,
            "gene":       self.gene,
            "diplotype":  self.diplotype,
            "phenotype":  self.phenotype,
            "risk_label": self.risk_label,
            "severity":   self.severity,
        }


@dataclass(frozen=True)
class Explanation:
    summary: str
    mechanism: str
    clinical_impact: str
    source: str = "llm"    # "llm" | "fallback"
