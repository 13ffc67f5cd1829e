"""Editing, workflow and query services built on the graph engine."""
from lattice.services.edit_service import Rebinding, edit_node, reaffirm_edges
from lattice.services.lint_service import (
    LintIssue,
    LintReport,
    LintSeverity,
    fix_issues,
    lint_lattice,
)
from lattice.services.refine_service import RefineResult, refine_requirement
from lattice.services.resolve_service import VerifyResult, resolve_node, verify_implementation
from lattice.services.search_service import SearchQuery, related_node_ids, search_nodes
from lattice.services.summary_service import LatticeSummary, summarize_lattice

__all__ = [
    "LatticeSummary",
    "LintIssue",
    "LintReport",
    "LintSeverity",
    "Rebinding",
    "RefineResult",
    "SearchQuery",
    "VerifyResult",
    "edit_node",
    "fix_issues",
    "lint_lattice",
    "reaffirm_edges",
    "refine_requirement",
    "related_node_ids",
    "resolve_node",
    "search_nodes",
    "summarize_lattice",
    "verify_implementation",
]
