# Suffixes handled by the built-in Python parser
PYTHON_EXTENSIONS = {".py", ".pyi"}

# Encoding used when reading source files
SOURCE_ENCODING = "utf-8"

# Module file whose dotted name is its package
PACKAGE_INIT_STEM = "__init__"

# Receiver names treated as the enclosing instance
INSTANCE_RECEIVERS = ("self",)

# Suffixes handled by the tree-sitter Java parser
JAVA_EXTENSIONS = {".java"}

# tree-sitter-java node types, by the symbol kind they declare
JAVA_CLASS_NODES = {"class_declaration", "enum_declaration", "record_declaration"}
JAVA_INTERFACE_NODES = {"interface_declaration", "annotation_type_declaration"}
JAVA_METHOD_NODES = {"method_declaration", "constructor_declaration"}
JAVA_FIELD_NODES = {"field_declaration", "constant_declaration"}

# Parents whose identifier children never read a variable
JAVA_NON_VALUE_PARENTS = {
    "package_declaration",
    "import_declaration",
    "scoped_identifier",
    "inferred_parameters",
    "labeled_statement",
    "break_statement",
    "continue_statement",
}
