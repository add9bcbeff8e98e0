"""Core reconciliation components."""

from .actions import ActionExecutor, ActionMode, ActionOutcome, ActionRecord
from .extractor import extract, normalize
from .inventory import ExclusionRule, build_inventory, scan, walk_files
from .orchestrator import Orchestrator, RunOptions, RunSummary
from .reconciler import reconcile
from .sources import FieldScan, ReferenceCollection, SourceReader

__all__ = [
    "ActionExecutor",
    "ActionMode",
    "ActionOutcome",
    "ActionRecord",
    "ExclusionRule",
    "FieldScan",
    "Orchestrator",
    "ReferenceCollection",
    "RunOptions",
    "RunSummary",
    "SourceReader",
    "build_inventory",
    "extract",
    "normalize",
    "reconcile",
    "scan",
    "walk_files",
]
