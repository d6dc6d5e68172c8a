"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Chat message display
    - User and session selection
    - Sending chat turns

Contains no business logic. Reads the message list, writes the session id.
"""
