"""Parser for module files (go.mod).

Extracts the module path, language/toolchain versions and the require,
exclude and replace directives. Other directives are recognised and
validated only as far as needed to reject malformed files.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from common.errors import ParseError
from versioning.models import DependencyRecord

logger = logging.getLogger(__name__)

_BLOCK_VERBS = {"require", "exclude", "replace", "retract", "godebug", "tool", "ignore"}
_SINGLE_VERBS = {"module", "go", "toolchain"}


@dataclass(frozen=True)
class Replacement:
    """A ``replace`` directive."""
    old_path: str
    old_version: str
    new_path: str
    new_version: str


@dataclass
class Manifest:
    """Parsed module file."""
    module_path: str = ""
    go_version: str = ""
    toolchain: str = ""
    requires: List[DependencyRecord] = field(default_factory=list)
    excludes: List[DependencyRecord] = field(default_factory=list)
    replaces: List[Replacement] = field(default_factory=list)

    def direct_requires(self) -> List[DependencyRecord]:
        """Requirements not annotated ``// indirect``."""
        return [r for r in self.requires if not r.indirect]


class _Line:  # pylint: disable=too-few-public-methods
    """Tokens and trailing comment of one source line."""

    def __init__(self, tokens: List[str], comment: str, lineno: int):
        self.tokens = tokens
        self.comment = comment
        self.lineno = lineno


def _tokenize(text: str, lineno: int, filename: str) -> _Line:
    """Split a single line into tokens and its ``//`` comment."""
    tokens: List[str] = []
    comment = ""
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c.isspace():
            i += 1
            continue
        if text.startswith("//", i):
            comment = text[i + 2:].strip()
            break
        if c in "()":
            tokens.append(c)
            i += 1
            continue
        if text.startswith("=>", i):
            tokens.append("=>")
            i += 2
            continue
        if c == '"':
            j = i + 1
            while j < n and text[j] != '"':
                j += 2 if text[j] == "\\" else 1
            if j >= n:
                raise ParseError(f"{filename}:{lineno}: unterminated quoted string")
            try:
                tokens.append(json.loads(text[i:j + 1]))
            except json.JSONDecodeError as exc:
                raise ParseError(f"{filename}:{lineno}: invalid quoted string: {exc.msg}") from exc
            i = j + 1
            continue
        if c == "`":
            j = text.find("`", i + 1)
            if j < 0:
                raise ParseError(f"{filename}:{lineno}: unterminated raw string")
            tokens.append(text[i + 1:j])
            i = j + 1
            continue
        j = i
        while j < n and not text[j].isspace() and text[j] not in '()"`':
            if text.startswith("//", j) or text.startswith("=>", j):
                break
            j += 1
        tokens.append(text[i:j])
        i = j
    return _Line(tokens, comment, lineno)


def _is_indirect(comment: str) -> bool:
    """Return True for an ``// indirect`` annotation (optionally followed by ``;``)."""
    if not comment:
        return False
    head = comment.split(";", 1)[0].strip()
    return head == "indirect"


def _parse_version_pair(args: List[str], verb: str, line: _Line, filename: str) -> Tuple[str, str]:
    if len(args) != 2:
        raise ParseError(f"{filename}:{line.lineno}: usage: {verb} module/path v1.2.3")
    path, version = args
    if not path or not version:
        raise ParseError(f"{filename}:{line.lineno}: usage: {verb} module/path v1.2.3")
    return path, version


def _parse_replace(args: List[str], line: _Line, filename: str) -> Replacement:
    if "=>" not in args:
        raise ParseError(f"{filename}:{line.lineno}: usage: replace module/path [v1.2.3] => other/module v1.4")
    arrow = args.index("=>")
    left, right = args[:arrow], args[arrow + 1:]
    if len(left) not in (1, 2) or len(right) not in (1, 2):
        raise ParseError(f"{filename}:{line.lineno}: usage: replace module/path [v1.2.3] => other/module v1.4")
    return Replacement(
        old_path=left[0],
        old_version=left[1] if len(left) == 2 else "",
        new_path=right[0],
        new_version=right[1] if len(right) == 2 else "",
    )


def _apply(manifest: Manifest, verb: str, args: List[str], line: _Line, filename: str) -> None:
    """Record one directive in ``manifest``."""
    if verb == "module":
        if len(args) != 1:
            raise ParseError(f"{filename}:{line.lineno}: usage: module module/path")
        if manifest.module_path:
            raise ParseError(f"{filename}:{line.lineno}: repeated module statement")
        manifest.module_path = args[0]
    elif verb == "go":
        if len(args) != 1:
            raise ParseError(f"{filename}:{line.lineno}: usage: go 1.23")
        manifest.go_version = args[0]
    elif verb == "toolchain":
        if len(args) != 1:
            raise ParseError(f"{filename}:{line.lineno}: usage: toolchain go1.23.0")
        manifest.toolchain = args[0]
    elif verb == "require":
        path, version = _parse_version_pair(args, verb, line, filename)
        manifest.requires.append(
            DependencyRecord(path=path, version=version, indirect=_is_indirect(line.comment))
        )
    elif verb == "exclude":
        path, version = _parse_version_pair(args, verb, line, filename)
        manifest.excludes.append(DependencyRecord(path=path, version=version))
    elif verb == "replace":
        manifest.replaces.append(_parse_replace(args, line, filename))
    elif verb in ("tool", "ignore"):
        if len(args) != 1:
            raise ParseError(f"{filename}:{line.lineno}: usage: {verb} path")
    elif verb in ("retract", "godebug"):
        if not args:
            raise ParseError(f"{filename}:{line.lineno}: usage: {verb} ...")
    else:
        raise ParseError(f"{filename}:{line.lineno}: unknown directive: {verb}")


def parse_modfile(data, filename: str = "go.mod") -> Manifest:
    """Parse module file content.

    Args:
        data: File content as ``bytes`` or ``str``.
        filename: Name used in error messages.

    Returns:
        Manifest: The parsed manifest.

    Raises:
        ParseError: On any syntax error.
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"{filename}: invalid UTF-8: {exc}") from exc
    else:
        text = data

    manifest = Manifest()
    block_verb: Optional[str] = None
    block_start = 0

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = _tokenize(raw, lineno, filename)
        tokens = line.tokens
        if not tokens:
            continue

        if block_verb is not None:
            if tokens == [")"]:
                block_verb = None
                continue
            if "(" in tokens or ")" in tokens:
                raise ParseError(f"{filename}:{lineno}: unexpected parenthesis in {block_verb} block")
            _apply(manifest, block_verb, tokens, line, filename)
            continue

        verb, args = tokens[0], tokens[1:]
        if verb not in _BLOCK_VERBS and verb not in _SINGLE_VERBS:
            raise ParseError(f"{filename}:{lineno}: unknown directive: {verb}")
        if args == ["("]:
            if verb not in _BLOCK_VERBS:
                raise ParseError(f"{filename}:{lineno}: {verb} does not accept a block")
            block_verb = verb
            block_start = lineno
            continue
        if args == ["(", ")"]:
            continue
        _apply(manifest, verb, args, line, filename)

    if block_verb is not None:
        raise ParseError(f"{filename}:{block_start}: unterminated {block_verb} block")

    logger.debug(
        "Parsed %s: module=%s requires=%d excludes=%d replaces=%d",
        filename,
        manifest.module_path,
        len(manifest.requires),
        len(manifest.excludes),
        len(manifest.replaces),
    )
    return manifest
