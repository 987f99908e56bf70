"""Routers package — HTTP endpoint definitions.

Files:
  coi.py   — ACORD 25 analysis route (/api/analyze)
"""
