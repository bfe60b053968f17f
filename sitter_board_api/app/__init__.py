"""
Application package initializer.

The service is split into a small number of layers.  ``core`` holds
configuration, logging, the error taxonomy and the storage and
identity collaborators.  ``services`` holds the notice lifecycle
rules and the read‑modify‑write orchestration on top of the store.
``api`` exposes the services over HTTP, grouped by version.
"""

from .main import app  # noqa: F401
