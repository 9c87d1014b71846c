"""Line-oriented package file parsing.

The package file lists one package per line. Comments start with the
configured comment marker and run to the end of the line. A line may also
hold ``{{ group(name="...", except=...) }}`` macros, which reference package
groups. Parsing is pure: macros become GroupReference values and are only
expanded later by the resolver.
"""

import ast
import re
from dataclasses import dataclass
from pathlib import Path

from scsync.core.errors import ConfigError, ConfigNotFoundError, TemplateRenderError
from scsync.core.groups import GroupReference

_MACRO_RE = re.compile(r"\{\{(.*?)\}\}")
_CALL_RE = re.compile(r"^\s*group\s*\((.*)\)\s*$", re.DOTALL)
_ARG_RE = re.compile(
    r"""\s*(?P<key>\w+)\s*=\s*
    (?P<value>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'|\[[^\]]*\]|[^,\s]+)
    \s*(?:,|$)""",
    re.VERBOSE,
)


@dataclass(frozen=True, slots=True)
class PackageFile:
    """Contents of a package file.

    Attributes:
        packages: Literal package names in file order.
        groups: Group references in file order.
    """

    packages: tuple[str, ...] = ()
    groups: tuple[GroupReference, ...] = ()


def strip_comment(line: str, comment_string: str) -> str:
    """Drop everything from the first comment marker on and trim the rest."""
    idx = line.find(comment_string)
    if idx != -1:
        line = line[:idx]
    return line.strip()


def _parse_arguments(args: str) -> dict[str, object]:
    """Parse ``key=value`` pairs of a macro call into Python values."""
    result: dict[str, object] = {}
    pos = 0
    args = args.strip()
    while pos < len(args):
        match = _ARG_RE.match(args, pos)
        if match is None or match.end() == pos:
            msg = f"Could not parse arguments of group(): {args}"
            raise TemplateRenderError(msg)
        key, raw = match.group("key"), match.group("value")
        try:
            result[key] = ast.literal_eval(raw)
        except (ValueError, SyntaxError) as e:
            msg = f"Invalid value for '{key}' in group(): {raw}"
            raise TemplateRenderError(msg) from e
        pos = match.end()
    return result


def parse_group_macro(body: str) -> GroupReference:
    """Turn the inside of a ``{{ ... }}`` block into a GroupReference.

    Args:
        body: Text between the braces, e.g. ``group(name="base")``.

    Returns:
        The referenced group with its exclusions.

    Raises:
        TemplateRenderError: If the call is not group(), lacks a name, or
            has arguments of the wrong type.
    """
    call = _CALL_RE.match(body)
    if call is None:
        msg = f"Unknown function in template: {body.strip()}"
        raise TemplateRenderError(msg)

    args = _parse_arguments(call.group(1))

    if "name" not in args:
        msg = "No group was specified"
        raise TemplateRenderError(msg)
    name = args["name"]
    if not isinstance(name, str):
        msg = "Groupname is no string!"
        raise TemplateRenderError(msg)

    exclude = args.get("except")
    if exclude is None:
        return GroupReference(name=name)
    if isinstance(exclude, str):
        return GroupReference(name=name, exclude=(exclude,))
    if isinstance(exclude, list):
        if not all(isinstance(v, str) for v in exclude):
            msg = "Array does contain non-String elements!"
            raise TemplateRenderError(msg)
        return GroupReference(name=name, exclude=tuple(exclude))
    msg = "except-Keyword can only contain Strings or Array of Strings."
    raise TemplateRenderError(msg)


def parse_package_file(text: str, comment_string: str = "#") -> PackageFile:
    """Parse the text of a package file.

    Comments are removed before macros are looked at, so a commented-out
    macro is never evaluated.

    Args:
        text: File contents.
        comment_string: Marker starting a comment.

    Returns:
        Literal packages and group references.

    Raises:
        TemplateRenderError: If a macro is malformed or shares its line with
            a package name.
    """
    packages: list[str] = []
    groups: list[GroupReference] = []

    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = strip_comment(raw_line, comment_string)
        if not line:
            continue

        if "{{" not in line and "}}" not in line:
            packages.append(line)
            continue

        if line.count("{{") != line.count("}}"):
            msg = f"Line {lineno}: unbalanced template braces: {line}"
            raise TemplateRenderError(msg)

        if _MACRO_RE.sub("", line).strip():
            msg = f"Line {lineno}: group() must be on its own line: {line}"
            raise TemplateRenderError(msg)

        for body in _MACRO_RE.findall(line):
            try:
                groups.append(parse_group_macro(body))
            except TemplateRenderError as e:
                raise TemplateRenderError(f"Line {lineno}: failed to render template") from e

    return PackageFile(packages=tuple(packages), groups=tuple(groups))


def load_package_file(path: Path, comment_string: str = "#") -> PackageFile:
    """Read and parse a package file.

    Raises:
        ConfigNotFoundError: If the file doesn't exist.
        ConfigError: If the file cannot be read.
        TemplateRenderError: If a macro is malformed.
    """
    if not path.exists():
        raise ConfigNotFoundError(f"Package file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ConfigError(f"Package file {path} is not valid UTF-8") from e
    except OSError as e:
        raise ConfigError(f"Failed to read package file {path}") from e
    return parse_package_file(text, comment_string)


def write_package_file(path: Path, packages: list[str]) -> Path:
    """Write package names one per line.

    Raises:
        ConfigError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("".join(f"{name}\n" for name in packages), encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to write package file {path}") from e
    return path
