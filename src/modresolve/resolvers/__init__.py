"""Protocol resolvers: HTTP(S), JSR, npm and ``node:`` builtins."""

from .http import HttpResolver
from .jsr import JsrResolver
from .node import NodeModuleResolver
from .npm import NpmResolver

__all__ = [
    "HttpResolver",
    "JsrResolver",
    "NodeModuleResolver",
    "NpmResolver",
]
