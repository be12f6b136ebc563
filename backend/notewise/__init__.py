"""
NoteWise Backend - Application Package
======================================

What: Notes API with AI-generated summaries and tags (Google Gemini).
Who:  Imported by uvicorn (`notewise.main:app`), Alembic, pytest and scripts.

Layering:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← notes workflow, Gemini client
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

The AI client (services/gemini_service.py and its helpers) has no dependency
on the HTTP or database layers and can be used on its own.
"""

__version__ = "1.0.0"
