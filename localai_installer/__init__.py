"""Local AI installer: Ollama + Open WebUI on a single Windows machine.

Core design goals:
- Strictly sequential, all-or-nothing stages
- Idempotent "ensure installed" per component
- Uniform retry around every download, install and model pull
- Centralized logging
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
