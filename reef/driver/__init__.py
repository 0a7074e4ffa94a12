"""Drivers that feed compilation units to the evaluator."""

from reef.driver.session import Session, run_file

__all__ = ["Session", "run_file"]
