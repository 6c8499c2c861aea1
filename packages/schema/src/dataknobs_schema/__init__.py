"""Runtime schema validation for dataknobs.

A schema is a graph of immutable nodes. Parsing a value walks the graph and
returns either the (possibly transformed) output value or every issue found:

- **Builders**: ``string()``, ``number()``, ``object_()``, ``union()``... build nodes
- **Parsing**: ``parse``/``safe_parse`` and their ``_async`` variants
- **Issues**: structured failures with a code, a path and a resolved message
- **Factory**: build nodes from YAML/JSON definitions
- **Registry**: attach metadata to schema nodes by identity

Example:
    ```python
    from dataknobs_schema import number, object_, string

    user = object_({
        "name": string().min(1),
        "email": string().with_format("email"),
        "age": number().integer().gte(0).optional(),
    })

    result = user.safe_parse({"name": "Ada", "email": "not-an-email"})
    result.success
    # False
    result.error.flatten()["field_errors"]
    # {'email': ['Invalid input']}
    ```
"""

from dataknobs_schema.builders import (
    any_,
    array,
    base64,
    boolean,
    cidrv4,
    cidrv6,
    custom,
    date,
    discriminated_union,
    email,
    enum_,
    hex_,
    hostname,
    instance_of,
    integer,
    intersection,
    ipv4,
    ipv6,
    iso_date,
    iso_datetime,
    iso_time,
    lazy,
    literal,
    loose_object,
    mapping,
    never,
    none,
    nullable,
    number,
    object_,
    optional,
    pipe,
    promise,
    record,
    set_,
    strict_object,
    string,
    transform,
    tuple_,
    union,
    unknown,
    url,
    uuid,
)
from dataknobs_schema.checks import Check, RefinementContext
from dataknobs_schema.config import SchemaConfig, configure, get_config, reset_config
from dataknobs_schema.engine import parse, parse_async, safe_parse, safe_parse_async
from dataknobs_schema.exceptions import (
    AsyncRequiredError,
    DefinitionError,
    DuplicateIdError,
    RegistryError,
    SchemaError,
    SchemaValidationError,
)
from dataknobs_schema.factory import SchemaFactory, build_check, build_schema, load_schema
from dataknobs_schema.formatting import flatten_error, prettify_error, tree_error
from dataknobs_schema.issues import (
    CustomIssue,
    InvalidElementIssue,
    InvalidFormatIssue,
    InvalidKeyIssue,
    InvalidTypeIssue,
    InvalidUnionIssue,
    InvalidValueIssue,
    Issue,
    IssueCode,
    NotMultipleOfIssue,
    TooBigIssue,
    TooSmallIssue,
    UnrecognizedKeysIssue,
)
from dataknobs_schema.kinds import register_kind
from dataknobs_schema.registry import SchemaRegistry, global_registry
from dataknobs_schema.result import SafeParseResult
from dataknobs_schema.schema import Schema
from dataknobs_schema.utils import MISSING

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core
    "Schema",
    "Check",
    "RefinementContext",
    "MISSING",
    "SafeParseResult",
    "parse",
    "safe_parse",
    "parse_async",
    "safe_parse_async",
    "register_kind",
    # Builders
    "string",
    "number",
    "integer",
    "boolean",
    "date",
    "none",
    "any_",
    "unknown",
    "never",
    "literal",
    "enum_",
    "object_",
    "strict_object",
    "loose_object",
    "array",
    "tuple_",
    "record",
    "mapping",
    "set_",
    "union",
    "discriminated_union",
    "intersection",
    "optional",
    "nullable",
    "lazy",
    "promise",
    "transform",
    "pipe",
    "custom",
    "instance_of",
    "email",
    "url",
    "uuid",
    "ipv4",
    "ipv6",
    "cidrv4",
    "cidrv6",
    "iso_datetime",
    "iso_date",
    "iso_time",
    "base64",
    "hex_",
    "hostname",
    # Issues
    "Issue",
    "IssueCode",
    "InvalidTypeIssue",
    "TooBigIssue",
    "TooSmallIssue",
    "InvalidFormatIssue",
    "NotMultipleOfIssue",
    "UnrecognizedKeysIssue",
    "InvalidUnionIssue",
    "InvalidKeyIssue",
    "InvalidElementIssue",
    "InvalidValueIssue",
    "CustomIssue",
    # Exceptions
    "SchemaError",
    "DefinitionError",
    "AsyncRequiredError",
    "RegistryError",
    "DuplicateIdError",
    "SchemaValidationError",
    # Configuration
    "SchemaConfig",
    "configure",
    "get_config",
    "reset_config",
    # Factory
    "SchemaFactory",
    "build_schema",
    "build_check",
    "load_schema",
    # Registry
    "SchemaRegistry",
    "global_registry",
    # Formatting
    "flatten_error",
    "tree_error",
    "prettify_error",
]
