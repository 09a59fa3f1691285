"""
application - Session-scoped state and services used by the agents.

Depends on domain/ only. Talks to the backend through domain ports.
"""
