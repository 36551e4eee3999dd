"""Validation constants and enumerations.

This module contains the denylist used by the injection pattern validator
and the shape checks applied to values that are interpolated into DDL.
"""

import re
from enum import Enum


class FragmentKind(str, Enum):
    """Where a free-form SQL fragment came from.

    The value is the label used in validation error messages so that a
    rejected fragment can be attributed to its clause.
    """

    WHERE = "WHERE clause"
    HAVING = "HAVING clause"
    JOIN_ON = "JOIN ON clause"
    RAW_FIELD = "raw field expression"
    GENERATED = "generated column expression"
    CHECK = "CHECK constraint"


# Denylisted signatures, matched case-insensitively against raw fragments.
# Keywords are bounded so that names such as ``updated_at`` stay valid.
DANGEROUS_PATTERNS = (
    r";",
    r"--",
    r"#",
    r"/\*",
    r"\*/",
    r"\bUNION\b",
    r"\bDROP\b",
    r"\bDELETE\b",
    r"\bINSERT\b",
    r"\bUPDATE\b",
    r"\bEXEC\b",
    r"\bEXECUTE\b",
    r"\bSLEEP\b",
    r"\bBENCHMARK\b",
    r"\bLOAD_FILE\b",
    r"\bINTO\s+(?:OUT|DUMP)FILE\b",
    r"\bTRUNCATE\b",
    r"\bALTER\b",
    r"\bGRANT\b",
    r"\bxp_cmdshell\b",
)

COMPILED_DANGEROUS_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE) for pattern in DANGEROUS_PATTERNS
)

# Foreign key references must look like ``table(column)``
FOREIGN_KEY_REFERENCE_PATTERN = re.compile(r"^\w+\(\w+\)$")

# Engine, charset and collation names cannot be bound in DDL
DDL_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")

# Characters that mark a field value as an already composed SQL expression
EXPRESSION_MARKERS = ("(", "`", "'", '"')

# Quote characters that open a region in which ``?`` is not a placeholder
PLACEHOLDER_QUOTES = ("'", '"', "`")
