"""Configuration constants and patterns for type-safety analysis."""
from typing import Dict, FrozenSet, List, Tuple

# Report locations
DEFAULT_JSON_REPORT = "type-safety-report.json"
DEFAULT_MARKDOWN_REPORT = "docs/TYPE_SAFETY_REPORT.md"
ENV_JSON_REPORT = "TYPE_SAFETY_JSON_REPORT"
ENV_MARKDOWN_REPORT = "TYPE_SAFETY_MARKDOWN_REPORT"

# Restricts a run to a single source file (overrides positional paths)
ENV_TARGET_FILE = "TYPE_SAFETY_TARGET_FILE"

# Severities
SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_INFO = "info"

# Issue taxonomy
CODE_IMPLICIT_DYNAMIC = "IMPLICIT-DYNAMIC"
CODE_TYPE_ASSERTION = "TYPE-ASSERTION"
CODE_NON_NULL_ASSERTION = "NON-NULL-ASSERTION"
CODE_UNSAFE_COERCION = "UNSAFE-COERCION"
CODE_MISSING_PARAM_TYPE = "MISSING-PARAM-TYPE"
CODE_MISSING_RETURN_TYPE = "MISSING-RETURN-TYPE"
CODE_UNCHECKED_INDEX_ACCESS = "UNCHECKED-INDEX-ACCESS"
ISSUE_CODES: Tuple[str, ...] = (
    CODE_IMPLICIT_DYNAMIC,
    CODE_TYPE_ASSERTION,
    CODE_NON_NULL_ASSERTION,
    CODE_UNSAFE_COERCION,
    CODE_MISSING_PARAM_TYPE,
    CODE_MISSING_RETURN_TYPE,
    CODE_UNCHECKED_INDEX_ACCESS,
)

# Source discovery
SOURCE_FILE_EXTENSIONS = {".py"}
SKIPPED_WALK_DIRS = {".git", ".hg", ".svn", "__pycache__", ".mypy_cache", ".pytest_cache", ".ruff_cache"}

# Unit filtering: third-party dependency artifacts
DEPENDENCY_PATH_MARKERS: FrozenSet[str] = frozenset({
    "node_modules",
    "site-packages",
    "dist-packages",
    ".venv",
    "venv",
    "__pypackages__",
    ".tox",
    ".nox",
    ".eggs",
})

# Unit filtering: the tool's own test-suite files
TEST_FILE_PREFIXES: Tuple[str, ...] = ("test_",)
TEST_FILE_SUFFIXES: Tuple[str, ...] = ("_test.py",)
TEST_FILE_NAMES: FrozenSet[str] = frozenset({"conftest.py"})
TEST_FILE_MARKER = ".test."

# Unit filtering: generated code
GENERATED_FILE_SUFFIXES: Tuple[str, ...] = ("_pb2.py", "_pb2_grpc.py")

# Fully dynamic type spellings (after import resolution)
DYNAMIC_TYPE_NAMES: FrozenSet[str] = frozenset({
    "Any",
    "typing.Any",
    "typing_extensions.Any",
})

# Calls whose result a checker types as Any
DYNAMIC_RETURNING_CALLS: FrozenSet[str] = frozenset({
    "eval",
    "json.load",
    "json.loads",
    "pickle.load",
    "pickle.loads",
    "marshal.loads",
    "yaml.load",
    "yaml.safe_load",
    "yaml.full_load",
})

# Fully qualified names of the cast helpers
TYPE_ASSERTION_CALLS: FrozenSet[str] = frozenset({
    "typing.cast",
    "typing_extensions.cast",
})

# Builtin primitive conversions that normalise arbitrary input
COERCION_BUILTINS: FrozenSet[str] = frozenset({"int", "float", "str", "bool", "complex"})

# Names whose subscription builds a generic alias rather than reading an element
GENERIC_ALIAS_NAMES: FrozenSet[str] = frozenset({
    "list",
    "dict",
    "set",
    "frozenset",
    "tuple",
    "type",
})
GENERIC_ALIAS_MODULES: Tuple[str, ...] = ("typing.", "typing_extensions.", "collections.abc.")

# Literal default/value types the oracle can name directly
LITERAL_DISPLAY_TYPES: Dict[str, str] = {
    "List": "list",
    "ListComp": "list",
    "Dict": "dict",
    "DictComp": "dict",
    "Set": "set",
    "SetComp": "set",
    "Tuple": "tuple",
    "JoinedStr": "str",
}

# Reporting limits
TOP_CODES_LIMIT = 10
TOP_UNITS_LIMIT = 10

# Narrative report recommendations
RECOMMENDATIONS: List[str] = [
    "Run the type checker in strict mode (`mypy --strict` or pyright `strict`) so implicit `Any` is rejected at build time.",
    "Annotate every parameter and return value; use `Any` explicitly only where dynamism is intended.",
    "Replace `typing.cast()` with `isinstance()` narrowing or `TypeGuard` helpers.",
    "Replace `assert x is not None` with an explicit check that raises, since asserts are stripped under `-O`.",
    "Validate and parse external input instead of coercing it with `int()`, `float()`, `str()` or `bool()`.",
    "Guard indexed access with a membership or bounds check, or use `.get()` with a default.",
]
