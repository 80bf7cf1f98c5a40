"""Connection-level handlers.

connections.py:
    Admission control with a semaphore-bounded slot pool.

sessions.py:
    Registry of live relay sessions (one per session key).

websocket/:
    Client frame parsing, upgrade checks, error replies and the /ws entry
    point (``websocket.manager``).
"""
