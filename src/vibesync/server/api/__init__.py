"""
REST API for VibeSync.

Provides a single FastAPI application serving:
- Analysis history endpoints (/api/history)
- Notes endpoints (/api/notes)
- Gemini-backed analysis and chat endpoints (/api/analyze, /api/chat)
- Health and status endpoints
"""
