"""
Semantic Type Definitions & Validation Primitives.

Annotated Pydantic types shared by the configuration schemas. Invalid
values are rejected at the edge of the application, during schema
initialization, before any lock or device is touched.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
from pathlib import Path
from typing import Annotated, Literal

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
from pydantic import AfterValidator, Field, PlainSerializer

# =========================================================================== #
#                                VALIDATORS                                   #
# =========================================================================== #


def _sanitize_path(v: Path) -> Path:
    """Resolve path to absolute form without disk side-effects."""
    return v.expanduser().resolve()


def _check_env_name(v: str) -> str:
    if "=" in v or "\0" in v:
        raise ValueError(f"Invalid environment variable name: {v!r}")
    return v


# =========================================================================== #
#                                1. FILESYSTEM                                #
# =========================================================================== #

ValidatedPath = Annotated[
    Path,
    AfterValidator(_sanitize_path),
    PlainSerializer(lambda v: str(v), when_used="json", return_type=str)
]

LockName = Annotated[
    str,
    Field(pattern=r"^[A-Za-z0-9._-]+$", min_length=1, max_length=128)
]

# =========================================================================== #
#                                2. SCHEDULING                                #
# =========================================================================== #

ResourceCount = Annotated[int, Field(ge=1, le=1024)]
PollSeconds   = Annotated[float, Field(gt=0.0, le=3600.0)]

# =========================================================================== #
#                                3. SYSTEM                                    #
# =========================================================================== #

EnvVarName = Annotated[str, Field(min_length=1), AfterValidator(_check_env_name)]
LogLevel   = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
