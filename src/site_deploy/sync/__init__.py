from .reconciler import TreeReconciler, reconcile
from .reducer import reduce_to_directories
from .tree_scanner import list_tree
from .utils import DirectoryEntry, EntryKind, ReconcileReport

__all__ = [
    "TreeReconciler",
    "reconcile",
    "reduce_to_directories",
    "list_tree",
    "DirectoryEntry",
    "EntryKind",
    "ReconcileReport",
]
