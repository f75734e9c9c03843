"""Parser for go.mod and go.work files.

Understands the subset of the module file grammar that shana needs:
module, go, toolchain, require, replace and use, in both single-line and
block form. Other known directives (exclude, retract, godebug, tool,
ignore) are accepted and skipped.

Contract:
- Inputs: File text
- Outputs: ModFile / WorkFile models
- Side Effects: None (pure)
"""

import json
import re
from collections.abc import Iterator

from ..errors import ResolutionError
from ..models import ModFile
from ..models import ModuleVersion
from ..models import Replacement
from ..models import Requirement
from ..models import WorkFile

_TOKEN_RE = re.compile(r'"(?:[^"\\]|\\.)*"|`[^`]*`|//|=>|[()]|(?:(?!//)[^\s()"`])+')

_SKIPPED_MOD_VERBS = {"exclude", "retract", "godebug", "tool", "ignore"}
_SKIPPED_WORK_VERBS = {"godebug"}


def _tokenize(line: str) -> tuple[list[str], str]:
    """Split a line into tokens and its trailing // comment."""
    tokens: list[str] = []
    for match in _TOKEN_RE.finditer(line):
        token = match.group(0)
        if token.startswith("//"):
            return tokens, line[match.start() + 2 :].strip()
        tokens.append(token)
    return tokens, ""


def _unquote(token: str, filename: str, lineno: int) -> str:
    if token.startswith("`"):
        return token[1:-1]
    if token.startswith('"'):
        try:
            return json.loads(token)
        except ValueError as e:
            raise ResolutionError(f"{filename}:{lineno}: invalid quoted string {token}") from e
    return token


def _iter_directives(text: str, filename: str) -> Iterator[tuple[str, list[str], str, int]]:
    """Yield (verb, args, comment, lineno), flattening ( ... ) blocks."""
    block_verb: str | None = None

    for lineno, line in enumerate(text.splitlines(), start=1):
        tokens, comment = _tokenize(line)
        if not tokens:
            continue

        if block_verb is not None:
            if tokens == [")"]:
                block_verb = None
                continue
            if "(" in tokens or ")" in tokens:
                raise ResolutionError(f"{filename}:{lineno}: unexpected parenthesis in {block_verb} block")
            yield block_verb, [_unquote(t, filename, lineno) for t in tokens], comment, lineno
            continue

        verb, args = tokens[0], tokens[1:]
        if args == ["("]:
            block_verb = verb
            continue
        if args == ["(", ")"]:
            continue
        if "(" in args or ")" in args:
            raise ResolutionError(f"{filename}:{lineno}: unexpected parenthesis")
        yield verb, [_unquote(t, filename, lineno) for t in args], comment, lineno

    if block_verb is not None:
        raise ResolutionError(f"{filename}: unterminated {block_verb} block")


def _parse_replace(args: list[str], filename: str, lineno: int) -> Replacement:
    if "=>" not in args:
        raise ResolutionError(f"{filename}:{lineno}: replace directive missing =>")

    arrow = args.index("=>")
    old, new = args[:arrow], args[arrow + 1 :]
    if len(old) not in (1, 2) or len(new) not in (1, 2):
        raise ResolutionError(f"{filename}:{lineno}: usage: replace module/path [v1.2.3] => other/module v1.4")

    return Replacement(
        old=ModuleVersion(path=old[0], version=old[1] if len(old) == 2 else ""),
        new=ModuleVersion(path=new[0], version=new[1] if len(new) == 2 else ""),
    )


def _single_arg(verb: str, args: list[str], filename: str, lineno: int) -> str:
    if len(args) != 1:
        raise ResolutionError(f"{filename}:{lineno}: usage: {verb} <value>")
    return args[0]


def parse_mod_file(text: str, filename: str = "go.mod") -> ModFile:
    """Parse go.mod text.

    Args:
        text: File contents
        filename: Name used in error messages

    Returns:
        Parsed ModFile

    Raises:
        ResolutionError: On any syntax error or unknown directive
    """
    mod_file = ModFile()

    for verb, args, comment, lineno in _iter_directives(text, filename):
        if verb == "module":
            mod_file.module = _single_arg(verb, args, filename, lineno)
        elif verb == "go":
            mod_file.go = _single_arg(verb, args, filename, lineno)
        elif verb == "toolchain":
            mod_file.toolchain = _single_arg(verb, args, filename, lineno)
        elif verb == "require":
            if len(args) != 2:
                raise ResolutionError(f"{filename}:{lineno}: usage: require module/path v1.2.3")
            mod_file.requires.append(
                Requirement(
                    mod=ModuleVersion(path=args[0], version=args[1]),
                    indirect=comment.split(";")[0].strip() == "indirect",
                )
            )
        elif verb == "replace":
            mod_file.replaces.append(_parse_replace(args, filename, lineno))
        elif verb not in _SKIPPED_MOD_VERBS:
            raise ResolutionError(f"{filename}:{lineno}: unknown directive: {verb}")

    return mod_file


def parse_work_file(text: str, filename: str = "go.work") -> WorkFile:
    """Parse go.work text.

    Raises:
        ResolutionError: On any syntax error or unknown directive
    """
    work_file = WorkFile()

    for verb, args, _comment, lineno in _iter_directives(text, filename):
        if verb == "go":
            work_file.go = _single_arg(verb, args, filename, lineno)
        elif verb == "toolchain":
            work_file.toolchain = _single_arg(verb, args, filename, lineno)
        elif verb == "use":
            work_file.uses.append(_single_arg(verb, args, filename, lineno))
        elif verb == "replace":
            work_file.replaces.append(_parse_replace(args, filename, lineno))
        elif verb not in _SKIPPED_WORK_VERBS:
            raise ResolutionError(f"{filename}:{lineno}: unknown directive: {verb}")

    return work_file


def supports_workspaces(go_version: str | None) -> bool:
    """Whether a go directive is new enough for go.work (Go 1.18+)."""
    if not go_version:
        return False

    match = re.match(r"^(\d+)\.(\d+)", go_version)
    if not match:
        return False
    return (int(match.group(1)), int(match.group(2))) >= (1, 18)
