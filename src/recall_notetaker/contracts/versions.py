"""
Версии контрактов (HTTP).

Назначение:
- единая точка истинных версий
"""

from __future__ import annotations

HTTP_API_VERSION = "v1"
