"""Test package for ragchat.

Unit tests for isolated logic and integration tests for the gateway and the
chat flow against an in-process controller API stand-in.

Structure:
    - unit/: Store, controller, loaders, schemas and config tests
    - integration/: Gateway and chat flow tests over ASGITransport

No network access is needed. Leverages pytest with pytest-check for soft
assertions.
"""
