"""
Instance Directory Module

Key-value store mapping internal VNF ids to the resources created for them.
"""

from .base import BaseInstanceDirectory
from .factory import DirectoryBackend, create_directory
from .memory import MemoryInstanceDirectory
from .records import InstanceRecord

__all__ = [
    "BaseInstanceDirectory",
    "DirectoryBackend",
    "create_directory",
    "MemoryInstanceDirectory",
    "InstanceRecord",
]
