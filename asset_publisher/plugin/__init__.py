"""
Host build-tool integration.

BuildPlugin registers an emit-time callback through whichever hook style the
host supports and runs the publish pipeline on the emitted assets.
"""

from .hooks import AsyncHookRegistrar, EmitHookRegistrar, LegacyCallbackRegistrar, registrar_for
from .plugin import PLUGIN_NAME, BuildPlugin

__all__ = [
    "AsyncHookRegistrar",
    "BuildPlugin",
    "EmitHookRegistrar",
    "LegacyCallbackRegistrar",
    "PLUGIN_NAME",
    "registrar_for",
]
