"""Pytest configuration and shared VCF fixtures."""

import pytest

from backend.config import Settings

HEADER = "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO"
META = "##fileformat=VCFv4.2\n##source=PharmaGuardTest"


def vcf_row(chrom, pos, rsid, ref, alt, info):
    return "\t".join([chrom, str(pos), rsid, ref, alt, "50", "PASS", info])


def build_vcf(*rows, header=HEADER, meta=META):
    return "\n".join([meta, header, *rows]) + "\n"


@pytest.fixture
def make_vcf():
    return build_vcf


@pytest.fixture
def cyp2c19_star2_star17_vcf():
    """CYP2C19 *2 + *17, plus one off-panel gene row."""
    return build_vcf(
        vcf_row("chr10", 94781859, "rs4244285", "G", "A", "GENE=CYP2C19;RS=rs4244285;STAR=*2"),
        vcf_row("chr10", 94761900, "rs12248560", "C", "T", "GENE=CYP2C19;RS=rs12248560;STAR=*17"),
        vcf_row("chr7", 117559590, "rs113993960", "ATCT", "A", "GENE=CFTR;RS=rs113993960"),
    )


@pytest.fixture
def multi_gene_vcf():
    return build_vcf(
        vcf_row("chr22", 42524947, "rs3892097", "C", "T", "GENE=CYP2D6;RS=rs3892097;STAR=*4"),
        vcf_row("chr22", 42524947, "rs3892097", "C", "T", "GENE=CYP2D6;RS=rs3892097;STAR=*4"),
        vcf_row("chr10", 96741053, "rs1799853", "C", "T", "GENE=CYP2C9;RS=rs1799853;STAR=*2"),
        vcf_row("chr12", 21178615, "rs4149056", "T", "C", "GENE=SLCO1B1;RS=rs4149056;STAR=*5"),
        vcf_row("chr1", 97915614, "rs3918290", "C", "T", "GENE=DPYD;RS=rs3918290;STAR=*2A"),
        vcf_row("chr1", 97981395, "rs56038477", "T", "G", "GENE=DPYD;RS=rs56038477;STAR=*5"),
    )


@pytest.fixture
def offline_settings():
    """Settings with no LLM key: explanations always use templates."""
    return Settings(openai_api_key="", llm_timeout_seconds=0.5)
