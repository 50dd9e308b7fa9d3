"""
Page-side consent engine.

One ConsentEngine is built per page load; it holds back tracking scripts
until the visitor decides, remembers the decision in cookies and releases
scripts category by category.
"""
from .engine import ConsentEngine
from .page import HostPage, ScriptElement

__all__ = ["ConsentEngine", "HostPage", "ScriptElement"]
