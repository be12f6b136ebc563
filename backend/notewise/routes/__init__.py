"""
NoteWise Backend - API Routes Package
=====================================

Route Inventory:
    - notes.py:   /api/notes...          (CRUD, trash, AI summary/tags)
    - ai.py:      /api/ai/playground     (raw prompt to Gemini)
    - health.py:  /health                (database + Gemini check)

Routes stay thin: they read the request, call a service and return its
result. Errors are raised, never formatted here; main.py maps them to HTTP.
"""
