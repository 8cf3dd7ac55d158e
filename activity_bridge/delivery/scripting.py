"""
Scripting scopes for same-screen adaptivity

Scopes are ChainMaps: a child scope sees every binding of its parent and
keeps its own bindings local.
"""
from collections import ChainMap
from typing import Any, Optional

default_global_env: "ChainMap[str, Any]" = ChainMap({})


def create_child_scope(parent: "Optional[ChainMap[str, Any]]" = None) -> "ChainMap[str, Any]":
    if parent is None:
        parent = default_global_env
    return parent.new_child()
