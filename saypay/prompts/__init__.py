"""Prompt templates for the language model."""
