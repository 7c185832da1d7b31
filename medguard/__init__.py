"""
MedGuard Diagnosis Backend

Deterministic symptom-to-condition ranking with heuristic confidence
intervals, served over a FastAPI interface.
"""

__version__ = "1.0.0"
