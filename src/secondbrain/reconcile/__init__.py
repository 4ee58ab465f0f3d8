"""Template reconciliation engine: differ, classifier, file reconciler, config merger, prompts."""

from secondbrain.reconcile.classifier import (
    BINARY_EXTENSIONS,
    LARGE_FILE_THRESHOLD,
    Classification,
    classify,
    classify_pair,
    is_binary_path,
    is_large_file,
)
from secondbrain.reconcile.config_merge import (
    DEFAULT_MANIFEST,
    PluginListMerge,
    list_entries,
    load_manifest,
    merge_config_dir,
    merge_entry,
    merge_plugin_list,
    reset_config_dir,
    resolve_strategy,
    write_plugin_list,
)
from secondbrain.reconcile.confirm import (
    BatchChoice,
    ConfirmationController,
    ConfirmationResult,
    ScriptedAsker,
    confirm,
    select,
)
from secondbrain.reconcile.differ import (
    ChangeSummary,
    TextDiff,
    contents_equal,
    diff_texts,
    summarize_changes,
)
from secondbrain.reconcile.files import (
    create_file,
    ensure_dirs,
    is_dir_empty,
    reconcile_many,
    reconcile_one,
    remove_empty_dirs,
    remove_files,
)

__all__ = [
    "BINARY_EXTENSIONS",
    "DEFAULT_MANIFEST",
    "LARGE_FILE_THRESHOLD",
    "BatchChoice",
    "ChangeSummary",
    "Classification",
    "ConfirmationController",
    "ConfirmationResult",
    "PluginListMerge",
    "ScriptedAsker",
    "TextDiff",
    "classify",
    "classify_pair",
    "confirm",
    "contents_equal",
    "create_file",
    "diff_texts",
    "ensure_dirs",
    "is_binary_path",
    "is_dir_empty",
    "is_large_file",
    "list_entries",
    "load_manifest",
    "merge_config_dir",
    "merge_entry",
    "merge_plugin_list",
    "reconcile_many",
    "reconcile_one",
    "remove_empty_dirs",
    "remove_files",
    "reset_config_dir",
    "resolve_strategy",
    "select",
    "summarize_changes",
    "write_plugin_list",
]
