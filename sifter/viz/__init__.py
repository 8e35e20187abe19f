"""sifter.viz: matplotlib figures for reports and batches."""
