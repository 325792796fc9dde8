"""
Mediflow Shift Handover

Aggregates a nurse's patients' clinical activity over a shift and has
Gemini write the handover narrative for the incoming shift.
"""
__version__ = "1.0.0"
