"""
Unit tests for gene-scoped phenotype classification.
"""

import pytest

from genomics_engine.pgx_reference import GENE_PHENOTYPE_TABLES, TARGET_GENES
from genomics_engine.phenotype_engine import (
    activity_score,
    determine_phenotype,
    is_valid_phenotype_for_gene,
    normalize_diplotype,
    phenotype_description,
)


class TestNormalizeDiplotype:

    @pytest.mark.parametrize("raw, expected", [
        ("*17/*2", "*2/*17"),
        ("*2/*17", "*2/*17"),
        (" *3C / *3B ", "*3B/*3C"),
        ("*2xN/*1", "*1/*2xN"),
    ])
    def test_rank_order(self, raw, expected):
        assert normalize_diplotype(raw) == expected

    @pytest.mark.parametrize("raw", ["", None, "Unknown"])
    def test_unknown(self, raw):
        assert normalize_diplotype(raw) == "Unknown"

    def test_non_pair_unchanged(self):
        assert normalize_diplotype("*1/*2/*3") == "*1/*2/*3"

    @pytest.mark.parametrize("gene", TARGET_GENES)
    def test_idempotent_on_table_keys(self, gene):
        for key in GENE_PHENOTYPE_TABLES[gene]:
            once = normalize_diplotype(key)
            assert normalize_diplotype(once) == once


class TestDeterminePhenotype:

    def test_cyp2c19_star2_star17_is_intermediate(self):
        assert determine_phenotype("CYP2C19", "*2/*17") == "IM"

    def test_cyp2c19_star1_star17_is_rapid(self):
        assert determine_phenotype("CYP2C19", "*1/*17") == "RM"

    def test_wild_type_cyp2d6(self):
        assert determine_phenotype("CYP2D6", "*1/*1") == "NM"

    def test_gene_case_insensitive(self):
        assert determine_phenotype(" cyp2c9 ", "*2/*3") == "PM"

    @pytest.mark.parametrize("gene, diplotype", [
        (None, "*1/*1"),
        ("CYP2D6", None),
        ("CYP2D6", "Unknown"),
        ("CFTR", "*1/*1"),
    ])
    def test_missing_inputs_are_unknown(self, gene, diplotype):
        assert determine_phenotype(gene, diplotype) == "Unknown"

    @pytest.mark.parametrize("gene", TARGET_GENES)
    def test_operand_order_insensitive(self, gene):
        for key in GENE_PHENOTYPE_TABLES[gene]:
            a, b = key.split("/")
            assert determine_phenotype(gene, f"{a}/{b}") == determine_phenotype(gene, f"{b}/{a}")

    def test_table_values_returned(self):
        for gene, table in GENE_PHENOTYPE_TABLES.items():
            for diplotype, expected in table.items():
                assert determine_phenotype(gene, diplotype) == expected

    def test_diplotype_in_other_genes_table_not_borrowed(self):
        # *1/*2xN is a CYP2D6 entry only
        assert determine_phenotype("CYP2C9", "*1/*2xN") == "Unknown"


class TestActivityScoreFallback:

    def test_slco1b1_star1b_star5(self):
        assert "*1B/*5" not in GENE_PHENOTYPE_TABLES["SLCO1B1"]
        assert activity_score("SLCO1B1", "*1B", "*5") == 1.0
        assert determine_phenotype("SLCO1B1", "*1B/*5") == "IM"

    def test_slco1b1_star15_star17_is_poor(self):
        assert determine_phenotype("SLCO1B1", "*15/*17") == "PM"

    def test_dpyd_star2a_star5(self):
        assert activity_score("DPYD", "*2A", "*5") == 0.5
        assert determine_phenotype("DPYD", "*2A/*5") == "PM"
        assert determine_phenotype("DPYD", "*5/*2A") == "PM"

    def test_dpyd_star5_star13_is_intermediate(self):
        assert determine_phenotype("DPYD", "*5/*13") == "IM"

    def test_unscored_allele_is_unknown(self):
        assert activity_score("DPYD", "*1", "*99") is None
        assert determine_phenotype("DPYD", "*1/*99") == "Unknown"

    @pytest.mark.parametrize("gene, diplotype", [
        ("CYP2C19", "*2/*4"),
        ("CYP2D6", "*4/*10"),
        ("CYP2C9", "*1/*5"),
        ("TPMT", "*1/*4"),
    ])
    def test_enumerated_genes_never_use_scores(self, gene, diplotype):
        assert activity_score(gene, *diplotype.split("/")) is None
        assert determine_phenotype(gene, diplotype) == "Unknown"

    def test_scored_enumerated_gene_still_unknown(self, monkeypatch):
        scores = {"CYP2D6": {"*4": 0.0, "*10": 0.5}, "DPYD": {"*1": 1.0, "*9A": 1.0}}
        monkeypatch.setattr("genomics_engine.phenotype_engine.ALLELE_FUNCTION_SCORES", scores)
        assert activity_score("CYP2D6", "*4", "*10") == 0.5
        assert determine_phenotype("CYP2D6", "*4/*10") == "Unknown"
        assert determine_phenotype("DPYD", "*1/*9A") == "NM"


class TestPhenotypeMetadata:

    def test_descriptions(self):
        assert phenotype_description("PM") == "Poor Metabolizer"
        assert phenotype_description("UM") == "Ultra-rapid Metabolizer"
        assert phenotype_description("XX") == "Unknown Phenotype"
        assert phenotype_description(None) == "Unknown Phenotype"

    def test_valid_phenotypes(self):
        assert is_valid_phenotype_for_gene("CYP2C19", "RM")
        assert not is_valid_phenotype_for_gene("CYP2D6", "RM")
        assert not is_valid_phenotype_for_gene("CYP2C9", "UM")
        assert is_valid_phenotype_for_gene("CFTR", "Unknown")
        assert not is_valid_phenotype_for_gene("CFTR", "NM")
