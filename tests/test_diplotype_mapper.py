"""
Unit tests for diplotype resolution from star-allele annotations.
"""

import itertools

import pytest

from genomics_engine.diplotype_mapper import (
    allele_rank,
    build_diplotype,
    build_diplotypes,
    determine_diplotype,
    sort_alleles,
)
from genomics_engine.pgx_reference import TARGET_GENES
from genomics_engine.vcf_parser import Variant


def make_variant(star, gene="CYP2C19", rsid="rs0"):
    return Variant(
        chrom="chr10", pos="1", variant_id=rsid, ref="A", alt="G",
        gene=gene, rsid=rsid, star_allele=star,
    )


class TestAlleleRank:

    def test_numeric_before_lexicographic(self):
        assert sort_alleles(["*17", "*2", "*3B", "*3A"]) == ["*2", "*3A", "*3B", "*17"]

    def test_labels_without_digits_rank_zero(self):
        assert allele_rank("*N")[0] == 0

    def test_duplication_suffix(self):
        assert allele_rank("*2xN") == (2, "*2xN")


class TestDetermineDiplotype:

    def test_no_variants_is_wild_type(self):
        assert determine_diplotype([]) == "*1/*1"

    def test_variants_without_star_labels_are_wild_type(self):
        assert determine_diplotype([make_variant(""), make_variant("")]) == "*1/*1"

    def test_non_star_labels_ignored(self):
        assert determine_diplotype([make_variant("HapB3", gene="DPYD")]) == "*1/*1"

    def test_single_label_once_is_heterozygous(self):
        assert determine_diplotype([make_variant("*4")]) == "*1/*4"

    def test_single_label_twice_is_homozygous(self):
        assert determine_diplotype([make_variant("*4"), make_variant("*4")]) == "*4/*4"

    def test_single_wild_type_label(self):
        assert determine_diplotype([make_variant("*1")]) == "*1/*1"

    def test_two_labels_rank_ordered(self):
        variants = [make_variant("*17"), make_variant("*2")]
        assert determine_diplotype(variants) == "*2/*17"

    def test_more_than_two_labels_keeps_lowest_ranked(self):
        variants = [make_variant("*17"), make_variant("*3"), make_variant("*2")]
        assert determine_diplotype(variants) == "*2/*3"

    def test_letter_suffix_tie_break(self):
        variants = [make_variant("*3C", gene="TPMT"), make_variant("*3B", gene="TPMT")]
        assert determine_diplotype(variants) == "*3B/*3C"

    def test_unlabelled_variants_do_not_count(self):
        variants = [make_variant(""), make_variant("*2"), make_variant("")]
        assert determine_diplotype(variants) == "*1/*2"

    @pytest.mark.parametrize("labels", [["*2", "*17"], ["*3A", "*2", "*2"], ["*5", "*1B"]])
    def test_file_order_does_not_matter(self, labels):
        results = {
            determine_diplotype([make_variant(s) for s in perm])
            for perm in itertools.permutations(labels)
        }
        assert len(results) == 1


class TestBuildDiplotypes:

    def test_evidence_is_carried(self):
        variants = [make_variant("*2", rsid="rs4244285"), make_variant("*17", rsid="rs12248560")]
        result = build_diplotype("cyp2c19", variants)
        assert result.gene == "CYP2C19"
        assert result.diplotype == "*2/*17"
        assert result.rsids == ("rs4244285", "rs12248560")
        assert result.star_alleles == ("*2", "*17")
        assert result.has_variants

    def test_every_target_gene_resolved(self):
        results = build_diplotypes({"CYP2C19": [make_variant("*2")]})
        assert list(results) == list(TARGET_GENES)
        assert results["CYP2C19"].diplotype == "*1/*2"
        assert results["DPYD"].diplotype == "*1/*1"
        assert not results["DPYD"].has_variants
