"""
Shared utilities for external calls.

- http.py - requests.Session with retry/backoff and a default timeout
"""
