"""
genomics_engine — deterministic variant-to-risk pipeline.

Stages (strictly forward):
  vcf_parser        — annotated VCF text → target-gene variants
  diplotype_mapper  — variants → normalized diplotype
  phenotype_engine  — (gene, diplotype) → metabolizer phenotype
  risk_classifier   — (drug, phenotype) → risk label, severity, recommendation
  pipeline          — one drug end to end
"""
