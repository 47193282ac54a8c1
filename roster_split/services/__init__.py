"""Scoring, reshaping, packaging and batch orchestration services."""
