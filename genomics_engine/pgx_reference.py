"""
pgx_reference.py
================
Process-wide, read-only pharmacogenomic lookup tables.

Every table here is built once at import time and exposed through
``types.MappingProxyType`` (or a tuple / frozenset), so the pipeline stages
can share them across concurrent requests without locking.  Nothing in the
engine ever writes to them.

Contents:
  TARGET_GENES            — gene allow-list used by the VCF extractor
  GENE_PHENOTYPE_TABLES   — gene → {normalized diplotype → phenotype code}
  ALLELE_FUNCTION_SCORES  — gene → {star allele → activity score}
                            (SLCO1B1 and DPYD only)
  DRUG_GENE_MAP           — drug (incl. aliases) → primary gene
  DRUG_RISK_TABLES        — drug → {phenotype code → RiskRule}
  SEVERITY_BY_LABEL       — canonical risk label → severity
  CLINICAL_ACTIONS        — risk label → generic action text
  DRUG_RATIONALES         — drug → {risk label → rationale text}
  VALID_PHENOTYPES        — gene → phenotype codes meaningful for that gene
  PHENOTYPE_DESCRIPTIONS  — phenotype code → long name

Sources: CPIC guidelines for CYP2D6/codeine, CYP2C19/clopidogrel,
CYP2C9/warfarin, SLCO1B1/simvastatin, TPMT/thiopurines and
DPYD/fluoropyrimidines.
"""

from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, NamedTuple, Tuple

# ---------------------------------------------------------------------------
# Phenotype codes
# ---------------------------------------------------------------------------
PM = "PM"
IM = "IM"
NM = "NM"
RM = "RM"
UM = "UM"
UNKNOWN = "Unknown"

PHENOTYPE_CODES: Tuple[str, ...] = (PM, IM, NM, RM, UM, UNKNOWN)

# ---------------------------------------------------------------------------
# Risk labels and severities
# ---------------------------------------------------------------------------
RISK_SAFE = "Safe"
RISK_ADJUST = "Adjust Dosage"
RISK_TOXIC = "Toxic"
RISK_INEFFECTIVE = "Ineffective"
RISK_UNKNOWN = "Unknown"

RISK_LABELS: Tuple[str, ...] = (
    RISK_SAFE, RISK_ADJUST, RISK_TOXIC, RISK_INEFFECTIVE, RISK_UNKNOWN,
)

SEVERITY_NONE = "none"
SEVERITY_LOW = "low"
SEVERITY_MODERATE = "moderate"
SEVERITY_HIGH = "high"
SEVERITY_CRITICAL = "critical"

WILD_TYPE_ALLELE = "*1"
WILD_TYPE_DIPLOTYPE = "*1/*1"
UNKNOWN_DIPLOTYPE = "Unknown"


def _freeze(table: Dict) -> Mapping:
    """Wrap a (possibly nested) dict in read-only mapping proxies."""
    return MappingProxyType({
        key: _freeze(value) if isinstance(value, dict) else value
        for key, value in table.items()
    })


# ---------------------------------------------------------------------------
# Gene allow-list
# ---------------------------------------------------------------------------
TARGET_GENES: Tuple[str, ...] = (
    "CYP2D6", "CYP2C19", "CYP2C9", "SLCO1B1", "TPMT", "DPYD",
)

# Genes whose allele combinatorics are not exhaustively tabulated; only these
# may fall back to the additive activity-score model.
ACTIVITY_SCORE_GENES: FrozenSet[str] = frozenset({"SLCO1B1", "DPYD"})


# ---------------------------------------------------------------------------
# Diplotype → phenotype tables (keys are rank-normalized diplotypes)
# ---------------------------------------------------------------------------
_CYP2C19: Dict[str, str] = {
    "*1/*1":   NM,
    "*1/*17":  RM,
    "*17/*17": UM,
    "*1/*2":   IM,
    "*1/*3":   IM,
    "*2/*17":  IM,   # not RM: one no-function allele dominates
    "*3/*17":  IM,
    "*2/*2":   PM,
    "*2/*3":   PM,
    "*3/*3":   PM,
}

_CYP2D6: Dict[str, str] = {
    "*1/*1":     NM,
    "*1/*2":     NM,
    "*2/*2":     NM,
    "*1/*4":     IM,
    "*2/*4":     IM,
    "*1/*5":     IM,
    "*4/*4":     PM,
    "*4/*5":     PM,
    "*5/*5":     PM,
    "*1/*2xN":   UM,
    "*2xN/*2xN": UM,
    "*1/*1xN":   UM,
}

_CYP2C9: Dict[str, str] = {
    "*1/*1": NM,
    "*1/*2": IM,
    "*1/*3": IM,
    "*2/*2": IM,
    "*2/*3": PM,
    "*3/*3": PM,
}

_SLCO1B1: Dict[str, str] = {
    "*1/*1":   NM,
    "*1a/*1a": NM,
    "*1a/*1b": NM,
    "*1b/*1b": NM,
    "*1B/*1B": NM,
    "*1/*1B":  NM,
    "*1/*5":   IM,
    "*1a/*5":  IM,
    "*1b/*5":  IM,
    "*1a/*15": IM,
    "*1b/*15": IM,
    "*1B/*15": IM,
    "*5/*5":   PM,
    "*15/*15": PM,
    "*5/*15":  PM,
}

_TPMT: Dict[str, str] = {
    "*1/*1":   NM,
    "*1/*2":   IM,
    "*1/*3A":  IM,
    "*1/*3B":  IM,
    "*1/*3C":  IM,
    "*2/*2":   PM,
    "*3A/*3A": PM,
    "*3B/*3B": PM,
    "*3C/*3C": PM,
    "*2/*3A":  PM,
    "*3B/*3C": PM,
}

_DPYD: Dict[str, str] = {
    "*1/*1":               NM,
    "Normal/Normal":       NM,
    "*1/*2A":              PM,
    "*2A/*2A":             PM,
    "*1/*5":               IM,
    "*5/*5":               PM,
    "*1/*13":              IM,
    "*1/*rs67376798":      IM,
    "Decreased/Normal":    IM,
    "Decreased/Decreased": PM,
    "NoFunction/Normal":   PM,
}

GENE_PHENOTYPE_TABLES: Mapping[str, Mapping[str, str]] = _freeze({
    "CYP2C19": _CYP2C19,
    "CYP2D6":  _CYP2D6,
    "CYP2C9":  _CYP2C9,
    "SLCO1B1": _SLCO1B1,
    "TPMT":    _TPMT,
    "DPYD":    _DPYD,
})


# ---------------------------------------------------------------------------
# Allele function scores for the activity-score fallback
# normal = 1, decreased = 0.5, no function = 0
# ---------------------------------------------------------------------------
ALLELE_FUNCTION_SCORES: Mapping[str, Mapping[str, float]] = _freeze({
    "SLCO1B1": {
        "*1":  1.0,
        "*1a": 1.0,
        "*1A": 1.0,
        "*1b": 1.0,
        "*1B": 1.0,
        "*5":  0.0,
        "*15": 0.0,
        "*17": 0.0,
    },
    "DPYD": {
        "*1":  1.0,
        "*2A": 0.0,
        "*5":  0.5,
        "*13": 0.5,
    },
})


# ---------------------------------------------------------------------------
# Drug → primary gene
# ---------------------------------------------------------------------------
DRUG_GENE_MAP: Mapping[str, str] = _freeze({
    "CODEINE":        "CYP2D6",
    "CLOPIDOGREL":    "CYP2C19",
    "WARFARIN":       "CYP2C9",
    "SIMVASTATIN":    "SLCO1B1",
    "AZATHIOPRINE":   "TPMT",
    "FLUOROURACIL":   "DPYD",
    "5-FLUOROURACIL": "DPYD",
    "5-FU":           "DPYD",
})

SUPPORTED_DRUGS: Tuple[str, ...] = tuple(DRUG_GENE_MAP.keys())


# ---------------------------------------------------------------------------
# Drug risk tables
# ---------------------------------------------------------------------------

class RiskRule(NamedTuple):
    risk: str
    severity: str      # informational only; the engine re-derives severity
    confidence: float


_CODEINE = {
    PM:      RiskRule(RISK_INEFFECTIVE, SEVERITY_HIGH,     0.95),
    IM:      RiskRule(RISK_ADJUST,      SEVERITY_MODERATE, 0.90),
    NM:      RiskRule(RISK_SAFE,        SEVERITY_NONE,     0.95),
    RM:      RiskRule(RISK_ADJUST,      SEVERITY_MODERATE, 0.85),
    UM:      RiskRule(RISK_TOXIC,       SEVERITY_CRITICAL, 0.95),
    UNKNOWN: RiskRule(RISK_UNKNOWN,     SEVERITY_LOW,      0.50),
}

_CLOPIDOGREL = {
    PM:      RiskRule(RISK_INEFFECTIVE, SEVERITY_HIGH,     0.95),
    IM:      RiskRule(RISK_ADJUST,      SEVERITY_MODERATE, 0.90),
    NM:      RiskRule(RISK_SAFE,        SEVERITY_NONE,     0.95),
    RM:      RiskRule(RISK_SAFE,        SEVERITY_NONE,     0.90),
    UM:      RiskRule(RISK_SAFE,        SEVERITY_NONE,     0.90),
    UNKNOWN: RiskRule(RISK_UNKNOWN,     SEVERITY_LOW,      0.50),
}

_WARFARIN = {
    PM:      RiskRule(RISK_ADJUST,  SEVERITY_MODERATE, 0.95),
    IM:      RiskRule(RISK_ADJUST,  SEVERITY_MODERATE, 0.90),
    NM:      RiskRule(RISK_SAFE,    SEVERITY_NONE,     0.95),
    RM:      RiskRule(RISK_SAFE,    SEVERITY_NONE,     0.85),
    UM:      RiskRule(RISK_SAFE,    SEVERITY_NONE,     0.85),
    UNKNOWN: RiskRule(RISK_UNKNOWN, SEVERITY_LOW,      0.50),
}

# SLCO1B1, TPMT and DPYD substrates share one shape: loss of function means
# accumulation.
_CLEARANCE_SUBSTRATE = {
    PM:      RiskRule(RISK_TOXIC,   SEVERITY_CRITICAL, 0.95),
    IM:      RiskRule(RISK_ADJUST,  SEVERITY_MODERATE, 0.90),
    NM:      RiskRule(RISK_SAFE,    SEVERITY_NONE,     0.95),
    RM:      RiskRule(RISK_SAFE,    SEVERITY_NONE,     0.85),
    UM:      RiskRule(RISK_SAFE,    SEVERITY_NONE,     0.85),
    UNKNOWN: RiskRule(RISK_UNKNOWN, SEVERITY_LOW,      0.50),
}

DRUG_RISK_TABLES: Mapping[str, Mapping[str, RiskRule]] = _freeze({
    "CODEINE":        _CODEINE,
    "CLOPIDOGREL":    _CLOPIDOGREL,
    "WARFARIN":       _WARFARIN,
    "SIMVASTATIN":    dict(_CLEARANCE_SUBSTRATE),
    "AZATHIOPRINE":   dict(_CLEARANCE_SUBSTRATE),
    "FLUOROURACIL":   dict(_CLEARANCE_SUBSTRATE),
    "5-FLUOROURACIL": dict(_CLEARANCE_SUBSTRATE),
    "5-FU":           dict(_CLEARANCE_SUBSTRATE),
})


# ---------------------------------------------------------------------------
# Canonical label → severity (applied after every table lookup)
# ---------------------------------------------------------------------------
SEVERITY_BY_LABEL: Mapping[str, str] = _freeze({
    RISK_SAFE:        SEVERITY_NONE,
    RISK_ADJUST:      SEVERITY_MODERATE,
    RISK_INEFFECTIVE: SEVERITY_HIGH,
    RISK_TOXIC:       SEVERITY_CRITICAL,
    RISK_UNKNOWN:     SEVERITY_LOW,
})


# ---------------------------------------------------------------------------
# Clinical recommendation templates
# ---------------------------------------------------------------------------
CLINICAL_ACTIONS: Mapping[str, str] = _freeze({
    RISK_SAFE: (
        "Standard dosing recommended. No pharmacogenomic adjustments required."
    ),
    RISK_ADJUST: (
        "Dose modification recommended based on pharmacogenomic profile. "
        "Consult CPIC guidelines for specific dosing recommendations."
    ),
    RISK_TOXIC: (
        "High risk of severe toxicity. Avoid use or consider significant dose "
        "reduction (>50%) under specialist supervision. Alternative therapy "
        "strongly recommended."
    ),
    RISK_INEFFECTIVE: (
        "Reduced or no therapeutic effect expected due to altered metabolism. "
        "Consider alternative medication with different metabolic pathway."
    ),
    RISK_UNKNOWN: (
        "Insufficient pharmacogenomic data for recommendation. Standard "
        "clinical monitoring advised."
    ),
})

_FLUOROURACIL_RATIONALES = {
    RISK_SAFE: (
        "DPYD normal activity indicates standard fluoropyrimidine metabolism. "
        "Standard oncology dosing appropriate."
    ),
    RISK_ADJUST: (
        "Decreased DPYD activity increases toxicity risk. Reduce starting dose "
        "by 25-50% per CPIC guidelines. Monitor closely for toxicity."
    ),
    RISK_TOXIC: (
        "Deficient DPYD activity causes severe, potentially fatal toxicity "
        "(mucositis, myelosuppression, neurotoxicity). AVOID fluoropyrimidines "
        "or reduce dose by ≥50%."
    ),
    RISK_UNKNOWN: (
        "Unable to determine DPYD activity. Consider phenotyping or cautious "
        "dosing with close toxicity monitoring."
    ),
}

DRUG_RATIONALES: Mapping[str, Mapping[str, str]] = _freeze({
    "CLOPIDOGREL": {
        RISK_SAFE: (
            "CYP2C19 metabolizer status indicates normal conversion of "
            "clopidogrel to its active metabolite. Standard antiplatelet "
            "effect expected."
        ),
        RISK_ADJUST: (
            "Reduced CYP2C19 function may decrease conversion to active "
            "metabolite. Consider prasugrel or ticagrelor as alternatives "
            "per CPIC guidelines."
        ),
        RISK_INEFFECTIVE: (
            "Poor CYP2C19 metabolism significantly impairs clopidogrel "
            "activation. High risk of treatment failure. Use alternative "
            "P2Y12 inhibitor (prasugrel/ticagrelor)."
        ),
        RISK_UNKNOWN: (
            "Unable to determine CYP2C19 metabolizer status. Monitor for "
            "adequate antiplatelet response."
        ),
    },
    "CODEINE": {
        RISK_SAFE: (
            "CYP2D6 normal metabolizer status indicates appropriate "
            "conversion of codeine to morphine. Standard analgesic effect "
            "expected."
        ),
        RISK_ADJUST: (
            "Altered CYP2D6 function affects morphine formation. Consider "
            "dose adjustment or alternative analgesic."
        ),
        RISK_TOXIC: (
            "Ultra-rapid CYP2D6 metabolism causes excessive morphine "
            "formation. HIGH RISK of respiratory depression and death. "
            "AVOID codeine. Use alternative analgesic."
        ),
        RISK_INEFFECTIVE: (
            "Poor CYP2D6 metabolism prevents conversion to morphine. No "
            "analgesic effect expected. Use alternative pain medication."
        ),
        RISK_UNKNOWN: (
            "Unable to determine CYP2D6 metabolizer status. Monitor closely "
            "for efficacy and adverse effects."
        ),
    },
    "WARFARIN": {
        RISK_SAFE: (
            "CYP2C9 normal function indicates standard warfarin metabolism. "
            "Standard dosing algorithm appropriate."
        ),
        RISK_ADJUST: (
            "Reduced CYP2C9 function decreases warfarin metabolism. Initiate "
            "with lower dose and monitor INR closely. Use CPIC/IWPC dosing "
            "algorithm."
        ),
        RISK_UNKNOWN: (
            "Unable to determine CYP2C9 metabolizer status. Initiate therapy "
            "cautiously with frequent INR monitoring."
        ),
    },
    "SIMVASTATIN": {
        RISK_SAFE: (
            "SLCO1B1 normal function indicates standard hepatic uptake of "
            "simvastatin. Standard dosing appropriate."
        ),
        RISK_ADJUST: (
            "Decreased SLCO1B1 function increases systemic simvastatin "
            "exposure. Limit dose to 20mg/day or consider alternative statin "
            "(pravastatin, rosuvastatin)."
        ),
        RISK_TOXIC: (
            "Poor SLCO1B1 function significantly increases myopathy risk. "
            "AVOID simvastatin >20mg. Consider pravastatin or rosuvastatin "
            "which are less SLCO1B1-dependent."
        ),
        RISK_UNKNOWN: (
            "Unable to determine SLCO1B1 function status. Consider lower "
            "starting dose with monitoring for muscle symptoms."
        ),
    },
    "AZATHIOPRINE": {
        RISK_SAFE: (
            "TPMT normal activity indicates standard thiopurine metabolism. "
            "Standard immunosuppressive dosing appropriate."
        ),
        RISK_ADJUST: (
            "Intermediate TPMT activity increases risk of myelosuppression. "
            "Reduce dose by 30-70% per CPIC guidelines. Monitor CBC weekly "
            "initially."
        ),
        RISK_TOXIC: (
            "Deficient TPMT activity causes severe, life-threatening "
            "myelosuppression. Reduce dose by 90% or AVOID. If used, requires "
            "intensive monitoring."
        ),
        RISK_UNKNOWN: (
            "Unable to determine TPMT activity. Consider lower starting dose "
            "with frequent CBC monitoring."
        ),
    },
    "FLUOROURACIL":   _FLUOROURACIL_RATIONALES,
    "5-FLUOROURACIL": dict(_FLUOROURACIL_RATIONALES),
    "5-FU":           dict(_FLUOROURACIL_RATIONALES),
})


# ---------------------------------------------------------------------------
# Phenotype metadata
# ---------------------------------------------------------------------------
VALID_PHENOTYPES: Mapping[str, FrozenSet[str]] = MappingProxyType({
    "CYP2C19": frozenset({PM, IM, NM, RM, UM, UNKNOWN}),
    "CYP2D6":  frozenset({PM, IM, NM, UM, UNKNOWN}),
    "CYP2C9":  frozenset({PM, IM, NM, UNKNOWN}),
    "SLCO1B1": frozenset({PM, IM, NM, UNKNOWN}),
    "TPMT":    frozenset({PM, IM, NM, UNKNOWN}),
    "DPYD":    frozenset({PM, IM, NM, UNKNOWN}),
})

PHENOTYPE_DESCRIPTIONS: Mapping[str, str] = _freeze({
    PM:      "Poor Metabolizer",
    IM:      "Intermediate Metabolizer",
    NM:      "Normal Metabolizer",
    RM:      "Rapid Metabolizer",
    UM:      "Ultra-rapid Metabolizer",
    UNKNOWN: "Unknown Phenotype",
})
