"""LifeHub - progression and scoring engine for workout tracking."""

import importlib.metadata

try:
    __version__ = importlib.metadata.version("lifehub-core")
except importlib.metadata.PackageNotFoundError:
    __version__ = "unknown"
