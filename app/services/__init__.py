"""Services package — all business logic lives here, never in routers.

Files:
  upload_validator.py — client (advisory) and server (authoritative) upload checks
  rasterizer.py       — PDF → JPEG page images (PyMuPDF)
  encoder.py          — image → data URI
  openai_service.py   — vision model client (OpenAI SDK, Groq endpoint)
  coi_service.py      — model fallback, output parsing, /api/analyze orchestration

Rule: routers call services.  No FastAPI imports in services.
"""
