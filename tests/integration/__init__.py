"""Integration tests for components working together as a system.

Coverage:
    - Every gateway operation against a FastAPI controller API stand-in
    - Failure normalization for HTTP errors, transport errors and bad bodies
    - Session selection, chatting and refresh through the real gateway

Requests run in-process through httpx ASGITransport and MockTransport.
"""
