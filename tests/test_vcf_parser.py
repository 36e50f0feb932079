"""
Unit tests for the VCF variant extractor and structural validation.
"""

import pytest

from genomics_engine.pgx_reference import TARGET_GENES
from genomics_engine.vcf_parser import (
    VCFStructureError,
    parse_info,
    parse_vcf,
    require_valid_vcf,
    validate_vcf,
)
from tests.conftest import build_vcf, vcf_row


class TestParseInfo:

    def test_keys_lowercased_values_verbatim(self):
        assert parse_info("GENE=CYP2D6;RS=rs3892097;STAR=*4") == {
            "gene": "CYP2D6", "rs": "rs3892097", "star": "*4",
        }

    def test_malformed_pairs_dropped(self):
        assert parse_info("GENE=;=x;DB;STAR=*2") == {"star": "*2"}

    @pytest.mark.parametrize("info", ["", ".", None])
    def test_empty(self, info):
        assert parse_info(info) == {}

    def test_extra_equals_keeps_second_part(self):
        assert parse_info("NOTE=a=b") == {"note": "a"}


class TestParseVCF:

    def test_filters_to_target_genes_and_groups(self, cyp2c19_star2_star17_vcf):
        result = parse_vcf(cyp2c19_star2_star17_vcf)

        assert result.success is True
        assert result.total_variants == 2
        assert result.genes_found == ["CYP2C19"]
        stars = [v.star_allele for v in result.gene_variants["CYP2C19"]]
        assert stars == ["*2", "*17"]
        assert result.target_genes == TARGET_GENES

    def test_variant_fields(self, cyp2c19_star2_star17_vcf):
        v = parse_vcf(cyp2c19_star2_star17_vcf).variants[0]
        assert (v.chrom, v.pos, v.variant_id, v.ref, v.alt) == (
            "chr10", "94781859", "rs4244285", "G", "A",
        )
        assert v.gene == "CYP2C19"
        assert v.rsid == "rs4244285"

    def test_gene_symbol_uppercased(self, make_vcf):
        content = make_vcf(vcf_row("chr6", 1, ".", "A", "G", "gene=tpmt;star=*3B"))
        result = parse_vcf(content)
        assert result.genes_found == ["TPMT"]
        assert result.variants[0].gene == "TPMT"

    def test_rsid_precedence(self, make_vcf):
        content = make_vcf(
            vcf_row("chr1", 1, "rsFromId", "A", "G", "GENE=DPYD;RS=rsFromRs;RSID=rsFromRsid"),
            vcf_row("chr1", 2, "rsFromId", "A", "G", "GENE=DPYD;RSID=rsFromRsid"),
            vcf_row("chr1", 3, "rsFromId", "A", "G", "GENE=DPYD"),
        )
        assert [v.rsid for v in parse_vcf(content).variants] == [
            "rsFromRs", "rsFromRsid", "rsFromId",
        ]

    def test_missing_star_is_empty_string(self, make_vcf):
        content = make_vcf(vcf_row("chr1", 1, "rs1", "A", "G", "GENE=DPYD"))
        variant = parse_vcf(content).variants[0]
        assert variant.star_allele == ""
        assert not variant.has_star_allele

    def test_rows_without_gene_skipped(self, make_vcf):
        content = make_vcf(vcf_row("chr1", 1, "rs1", "A", "G", "RS=rs1;STAR=*2"))
        assert parse_vcf(content).total_variants == 0

    def test_no_header_is_unsuccessful_and_empty(self):
        content = "##fileformat=VCFv4.2\n" + vcf_row("chr1", 1, "rs1", "A", "G", "GENE=DPYD") + "\n"
        result = parse_vcf(content)
        assert result.success is False
        assert result.total_variants == 0
        assert dict(result.gene_variants) == {}

    def test_rows_before_header_ignored(self):
        content = "\n".join([
            vcf_row("chr1", 1, "rs1", "A", "G", "GENE=DPYD;STAR=*2A"),
            "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO",
            vcf_row("chr1", 2, "rs2", "A", "G", "GENE=DPYD;STAR=*5"),
        ])
        result = parse_vcf(content)
        assert [v.rsid for v in result.variants] == ["rs2"]

    def test_short_rows_skipped(self, make_vcf):
        content = make_vcf("chr1\t1\trs1\tA", vcf_row("chr1", 2, "rs2", "A", "G", "GENE=DPYD"))
        result = parse_vcf(content)
        assert [v.rsid for v in result.variants] == ["rs2"]

    def test_header_column_order_respected(self):
        header = "#CHROM\tPOS\tINFO\tID\tREF\tALT"
        row = "\t".join(["chr10", "96741053", "GENE=CYP2C9;STAR=*3", "rs1057910", "A", "C"])
        result = parse_vcf(build_vcf(row, header=header))
        variant = result.variants[0]
        assert variant.star_allele == "*3"
        assert variant.variant_id == "rs1057910"
        assert variant.alt == "C"

    def test_lowercase_header_names(self):
        header = "#CHROM\tpos\tid\tref\talt\tqual\tfilter\tinfo"
        row = vcf_row("chr6", 18130918, "rs1800460", "C", "T", "GENE=TPMT;STAR=*3B")
        assert parse_vcf(build_vcf(row, header=header)).total_variants == 1

    def test_crlf_line_endings(self, cyp2c19_star2_star17_vcf):
        result = parse_vcf(cyp2c19_star2_star17_vcf.replace("\n", "\r\n"))
        assert [v.star_allele for v in result.variants] == ["*2", "*17"]

    def test_custom_allow_list(self, cyp2c19_star2_star17_vcf):
        result = parse_vcf(cyp2c19_star2_star17_vcf, target_genes=["CFTR"])
        assert result.genes_found == ["CFTR"]

    def test_result_is_read_only(self, cyp2c19_star2_star17_vcf):
        result = parse_vcf(cyp2c19_star2_star17_vcf)
        with pytest.raises(TypeError):
            result.gene_variants["DPYD"] = ()

    def test_counts_by_gene(self, multi_gene_vcf):
        assert parse_vcf(multi_gene_vcf).variants_by_gene_counts() == {
            "CYP2D6": 2, "CYP2C9": 1, "SLCO1B1": 1, "DPYD": 2,
        }


class TestValidateVCF:

    def test_valid(self, cyp2c19_star2_star17_vcf):
        validation = validate_vcf(cyp2c19_star2_star17_vcf)
        assert validation.valid is True
        assert validation.error is None
        assert validation.has_metadata is True

    @pytest.mark.parametrize("content", ["", None, b"#CHROM\tPOS", 42])
    def test_empty_or_non_text(self, content):
        validation = validate_vcf(content)
        assert validation.valid is False
        assert validation.error == "Empty or invalid file content"

    def test_missing_header(self):
        validation = validate_vcf("##fileformat=VCFv4.2\nchr1\t1\n")
        assert validation.valid is False
        assert "#CHROM" in validation.error

    def test_require_valid_vcf_raises(self):
        with pytest.raises(VCFStructureError, match="#CHROM"):
            require_valid_vcf("##fileformat=VCFv4.2\n")

    def test_require_valid_vcf_passes(self, cyp2c19_star2_star17_vcf):
        require_valid_vcf(cyp2c19_star2_star17_vcf)
