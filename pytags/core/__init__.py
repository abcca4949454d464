"""
pytags.core: shared source-location and diagnostic types.

Modules:
  - span: Span (offsets plus line/column ranges)
  - diagnostics: Diagnostic record and DiagnosticKind taxonomy
"""

from .diagnostics import Diagnostic, DiagnosticKind
from .span import Span

__all__ = ["Diagnostic", "DiagnosticKind", "Span"]
