"""
Proxy and sync service package.

A FastAPI application that forwards client calls to the Gemini and
dictionary APIs, relays audio bytes, and stores each user's decks, cards,
study log, profile and achievements with an offline-first merge.
"""
