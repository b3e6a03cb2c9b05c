"""
Shared utilities.

- http.py     - requests sessions with retry adapter and default timeout
- logging.py  - root logger setup for the CLI and flows
"""
