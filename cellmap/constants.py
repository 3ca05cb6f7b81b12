"""Shared constant values for the cellmap transpiler."""

GLOBAL_VAR = "__global"
IMPORT_FN = "__import"
CONSOLE_PARAM = "console"

WRAPPER_PARAMS = (GLOBAL_VAR, IMPORT_FN, CONSOLE_PARAM)
WRAPPER_NAME_TEMPLATE = "__cell_{id}__"
WRAPPER_NAME_PATTERN = r"__cell_\d+__"

TRANSPILED_SOURCE_TEMPLATE = "__transpiled_source_{id}"
TRANSPILED_SOURCE_PATTERN = r"__transpiled_source_(\d+)(?::(\d+))?(?::(\d+))?"
SOURCE_URL_MARKER = "\n//# sourceURL={url}"
# Follows the closing `})` of the wrapper and carries the logical name.
SOURCE_NAME_MARKER = "//# sourceUrl={name}"

TOP_LEVEL_LABEL = "<top level>"
ANONYMOUS_SOURCE = "<anonymous>"

# None keeps every record for the lifetime of the process.
HISTORY_LIMIT = None

REPL_PROMPT = "cell> "

SOURCE_MAP_VERSION = 3
VLQ_BASE64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"

__all__ = [
    "ANONYMOUS_SOURCE",
    "CONSOLE_PARAM",
    "GLOBAL_VAR",
    "HISTORY_LIMIT",
    "IMPORT_FN",
    "REPL_PROMPT",
    "SOURCE_MAP_VERSION",
    "SOURCE_NAME_MARKER",
    "SOURCE_URL_MARKER",
    "TOP_LEVEL_LABEL",
    "TRANSPILED_SOURCE_PATTERN",
    "TRANSPILED_SOURCE_TEMPLATE",
    "VLQ_BASE64",
    "WRAPPER_NAME_PATTERN",
    "WRAPPER_NAME_TEMPLATE",
    "WRAPPER_PARAMS",
]
