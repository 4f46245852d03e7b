"""
Command-Line Template Engine.

Replaces ``{}`` in command arguments with the claimed device ids. Braces
are scanned as runs ("bracket spans"); a lone ``{``, a lone ``}`` and the
pair ``}{`` are kept literally, every other span is read two characters at
a time:

    ``{}`` -> the substitution string
    ``{{`` -> ``{``
    ``}}`` -> ``}``
    anything else -> InvalidTemplateSyntax

Expansion is idempotent only when the substitution itself contains no
brace: expanding an already expanded argument whose substitution carried
braces may change it again.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
from dataclasses import dataclass
from itertools import groupby
from typing import Final, FrozenSet, Iterator, List, Optional, Sequence, Tuple, Union

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from ..core.errors import InvalidTemplateSyntax
from ..core.paths import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

Argument = Union[str, bytes]

BRACES: Final[FrozenSet[str]] = frozenset("{}")
_LITERAL_SPANS: Final[FrozenSet[str]] = frozenset({"{", "}", "}{"})


@dataclass(frozen=True)
class TemplateResult:
    """
    Attributes:
        command: The expanded argument.
        substitutions: Number of ``{}`` replaced.
        markers: Substitutions plus unescaped ``{{`` / ``}}`` pairs.
    """

    command: str
    substitutions: int
    markers: int


def _spans(token: str) -> Iterator[Tuple[bool, str]]:
    """Yields ``(is_bracket, span)`` for alternating plain and brace runs."""
    for is_bracket, chars in groupby(token, key=BRACES.__contains__):
        yield is_bracket, "".join(chars)


def expand_template(token: str, substitution: str) -> TemplateResult:
    """
    Expands every ``{}`` in ``token``.

    Args:
        token: One command-line argument.
        substitution: Replacement for each ``{}``.

    Returns:
        TemplateResult with the expanded text and the counts.

    Raises:
        InvalidTemplateSyntax: On an unpaired or mismatched brace run.
    """
    parts: List[str] = []
    substitutions = 0
    markers = 0

    for is_bracket, span in _spans(token):
        if not is_bracket or span in _LITERAL_SPANS:
            parts.append(span)
            continue

        for i in range(0, len(span), 2):
            chunk = span[i:i + 2]
            if chunk == "{}":
                parts.append(substitution)
                substitutions += 1
            elif chunk == "{{":
                parts.append("{")
            elif chunk == "}}":
                parts.append("}")
            else:
                raise InvalidTemplateSyntax(span, token)
            markers += 1

    return TemplateResult("".join(parts), substitutions, markers)


def as_text(arg: Argument) -> Optional[str]:
    """
    Returns ``arg`` as text, or None if it is not valid UTF-8.

    Undecodable bytes in ``sys.argv`` arrive as lone surrogates, which fail
    to encode; raw bytes are decoded strictly.
    """
    if isinstance(arg, bytes):
        try:
            return arg.decode("utf-8")
        except UnicodeDecodeError:
            return None
    try:
        arg.encode("utf-8")
    except UnicodeEncodeError:
        return None
    return arg


@dataclass(frozen=True)
class CommandTemplate:
    """
    A command line validated for templating, ready to be rendered.

    Attributes:
        arguments: Original arguments, program first.
        texts: Text form of each argument, None for opaque ones.
        substitutions: ``{}`` occurrences across all text arguments.
        markers: Template markers (substitutions plus escapes) across all
            text arguments.
    """

    arguments: Tuple[Argument, ...]
    texts: Tuple[Optional[str], ...]
    substitutions: int
    markers: int

    @classmethod
    def parse(cls, argv: Sequence[Argument]) -> "CommandTemplate":
        """
        Validates every argument before any device is touched.

        Opaque (non UTF-8) arguments are kept as-is and excluded from
        templating, with a warning.

        Raises:
            InvalidTemplateSyntax: If any text argument is malformed.
        """
        texts: List[Optional[str]] = []
        substitutions = 0
        markers = 0
        for arg in argv:
            text = as_text(arg)
            if text is None:
                logger.warning(
                    f"Failed to parse the argument you passed in: {arg!r}, most likely it "
                    "contains invalid UTF-8 characters. This argument will be ignored for "
                    "inserting GPU ids."
                )
            else:
                result = expand_template(text, "")
                substitutions += result.substitutions
                markers += result.markers
            texts.append(text)

        return cls(tuple(argv), tuple(texts), substitutions, markers)

    @property
    def uses_template(self) -> bool:
        """True when any argument carries a template marker, escapes included."""
        return self.markers > 0

    def render(self, substitution: str) -> List[Argument]:
        """Expands text arguments; opaque arguments pass through unchanged."""
        rendered: List[Argument] = []
        for original, text in zip(self.arguments, self.texts):
            if text is None:
                rendered.append(original)
            else:
                rendered.append(expand_template(text, substitution).command)
        return rendered
