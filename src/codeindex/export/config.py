# Supported export formats (case-insensitive)
EXPORT_FORMATS = ("markdown", "xml")

DEFAULT_EXPORT_FORMAT = "markdown"

# Group label for symbols without an enclosing class
TOP_LEVEL_GROUP = "Top-level"

MARKDOWN_TITLE = "# Project Symbol Index"
MARKDOWN_TABLE_HEADER = "| Kind | Name | Line | Signature |"
MARKDOWN_TABLE_RULE = "|------|------|------|-----------|"

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
XML_INDENT = "  "
