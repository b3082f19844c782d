"""
SkateSpots Backend - Application Package
========================================

What: REST backend for a skate spot directory (spots, images, reverse geocoding).
How:  Layered the same way in every module:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Spot rules, uploads, geocoding
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

Routes never touch SQL or the file system directly; services never build
HTTP responses.
"""

__version__ = "1.0.0"
