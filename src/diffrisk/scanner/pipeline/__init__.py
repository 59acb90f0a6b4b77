"""Helpers composing the evaluation pipeline."""
