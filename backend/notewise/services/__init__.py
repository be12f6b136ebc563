# Services package init
"""
NoteWise Backend - Services Layer
=================================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Services take plain values and sessions, apply rules and return
       schemas. Routes call the module-level singletons.

Service Inventory:
    - LLMService (abstract):  interface for text generation providers
    - GeminiService:          Gemini text generation, summaries, tags, connection test
    - NoteService:            note CRUD, trash, summary/tag regeneration

Support modules used by GeminiService:
    - token_utils:       character-based token estimate and truncation
    - error_classifier:  maps provider failures to GeminiError kinds
    - retry:             exponential backoff for rate-limited calls
    - output_parsers:    summary/tag post-processing
"""
