"""
app/routers — FastAPI Routers Module
======================================

Purpose:
  Modular router definitions for organized endpoint management.

Routers:
  - content:  CRUD for the standard portfolio collections, likes, reorder
  - feeds:    feed posts (hard delete)
  - timeline: journey timeline events and canvas geometry
  - site:     about me, settings, counts, GitHub stats, image lists, health
  - auth:     admin login, OTP, credential management
"""
