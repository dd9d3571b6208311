"""
MediScout - synthetic community health data and a simulated symptom checker.
"""

__version__ = "0.1.0"
