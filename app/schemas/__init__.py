"""Pydantic schemas package.

Folder intent:
  common.py   — CamelModel base + HealthResponse (API envelopes inherit CamelModel)
  acord.py    — typed ACORD 25 certificate record (relaxed, all fields optional)
  analyze.py  — /api/analyze success and error envelopes
"""
