"""
Fintrack - Source Package

Monthly aggregation and budget pacing for a personal finance tracker:
multi-currency income, expenses and savings transfers rolled up per
month, with a budget pace that tells the user whether spending is on track.

DESIGN PRINCIPLES:
1. Engine functions are pure and take an explicit snapshot
2. Fail early, fail visibly
3. No silent corrections
4. Every month is recomputed from scratch
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Fintrack Team"
