"""
Managers for behaviour manifests
"""

from .manifest_manager import ManifestManager

__all__ = ['ManifestManager']
