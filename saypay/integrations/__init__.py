"""Integrations with platform services outside the pipeline."""
