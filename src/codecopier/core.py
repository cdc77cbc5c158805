"""
Core logic for codecopier package.
"""

from __future__ import annotations

import gzip
import json
import os
import sys
import zlib
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, TextIO

import pathspec
from colorama import Fore, Style


# Exceptions
class CodeCopierError(Exception):
    """Base exception for codecopier errors."""


class ConfigError(CodeCopierError):
    """Raised when the configuration file is unreadable or invalid."""


class _PathError(CodeCopierError):
    def __init__(self, message: str, path: Path | str) -> None:
        super().__init__(message)
        self.path = path


class DiscoveryError(_PathError):
    """Raised when the project tree cannot be scanned."""


class DirectoryNotFoundError(DiscoveryError): ...
class PermissionDeniedError(DiscoveryError): ...


class FileReadError(_PathError):
    """Raised when a selected file cannot be read."""


class OutputError(_PathError):
    """Raised when the output document cannot be produced."""


class WriteError(OutputError): ...
class CompressionError(OutputError): ...


# Console helpers
def echo(msg: str, color: str = "", file: Optional[TextIO] = None) -> None:
    out = file if file is not None else sys.stdout
    if color:
        print(color + msg + Style.RESET_ALL, file=out)
    else:
        print(msg, file=out)


def debug(msg: str, verbose: bool) -> None:
    if verbose:
        echo(f"[codecopier] {msg}", Fore.LIGHTBLACK_EX)


# Configuration
CONFIG_FILENAME = ".codecopierrc.json"
DEFAULT_EXCLUDE: List[str] = ["node_modules/**", ".git/**"]
DEFAULT_INCLUDE: List[str] = ["**/*.{js,ts,py,java,c,cpp,h,hpp,css,html}"]


@dataclass
class CodeCopierConfig:
    include: List[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE))
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))


def resolve_config_path(root: Path, config_arg: Optional[Path] = None) -> Path:
    if config_arg is not None:
        return config_arg.resolve()
    return root / CONFIG_FILENAME


def _pattern_list(data: dict, key: str, config_path: Path) -> Optional[List[str]]:
    if key not in data:
        return None
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
        raise ConfigError(
            f"Invalid configuration in '{config_path}': \"{key}\" must be an array of strings"
        )
    return list(value)


def load_config(config_path: Path) -> CodeCopierConfig:
    """Read *config_path* and override the defaults key by key.

    A missing file is not an error: the defaults are returned. Only the
    ``include`` and ``exclude`` keys are read, and each one present must be a
    list of strings.
    """
    config = CodeCopierConfig()
    if not config_path.exists():
        echo("Using default configuration", Fore.YELLOW)
        return config
    if not config_path.is_file():
        raise ConfigError(f"'{config_path}' is not a file")

    echo(f"Configuration file found at: {config_path}", Fore.GREEN)
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Could not read config file '{config_path}': {e}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Could not parse config file '{config_path}': {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{config_path}' must contain a JSON object")

    exclude = _pattern_list(data, "exclude", config_path)
    if exclude is not None:
        config.exclude = exclude
    include = _pattern_list(data, "include", config_path)
    if include is not None:
        config.include = include
    return config


# Glob matching
def _split_top_level(body: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    current = ""
    for ch in body:
        if ch == "," and depth == 0:
            parts.append(current)
            current = ""
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        current += ch
    parts.append(current)
    return parts


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` groups, e.g. ``*.{js,ts}`` -> ``['*.js', '*.ts']``."""
    depth = 0
    start = 0
    for i, ch in enumerate(pattern):
        if ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth:
            depth -= 1
            if depth:
                continue
            alternatives = _split_top_level(pattern[start + 1 : i])
            if len(alternatives) < 2:
                continue
            prefix, suffix = pattern[:start], pattern[i + 1 :]
            expanded: List[str] = []
            for alt in alternatives:
                expanded.extend(expand_braces(prefix + alt + suffix))
            return list(dict.fromkeys(expanded))
    return [pattern]


class GlobPattern:
    """
    One glob pattern matched against a relative POSIX path.

    Patterns are anchored at the root (``*.js`` does not match ``src/a.js``),
    support ``{a,b}`` groups and ``**``, and a leading ``!`` negates the
    whole pattern. Unless *dot* is set, ``*``, ``?`` and ``**`` never match a
    path segment starting with ``.``; such segments must be spelled out.
    """

    def __init__(self, pattern: str, dot: bool = False) -> None:
        self.pattern = pattern
        self.dot = dot
        self.negated = False
        while pattern.startswith("!"):
            pattern = pattern[1:]
            self.negated = not self.negated
        self._alternatives = []
        for alt in expand_braces(pattern.lstrip("/")):
            if not alt:
                continue
            # the leading slash anchors the pattern and keeps "#" and "!" literal
            spec = pathspec.GitIgnoreSpec.from_lines(["/" + alt])
            self._alternatives.append((alt.split("/"), spec))

    def _match_one(self, parts: List[str], spec: "pathspec.GitIgnoreSpec", rel: str) -> bool:
        if not spec.match_file(rel):
            return False
        segments = rel.split("/")
        # gitignore also matches everything below a matching directory
        if parts[-1] != "**" and not fnmatchcase(segments[-1], parts[-1]):
            return False
        if self.dot:
            return True
        for seg in segments:
            if seg.startswith(".") and not any(
                p.startswith(".") and fnmatchcase(seg, p) for p in parts
            ):
                return False
        return True

    def match(self, rel: str) -> bool:
        hit = any(self._match_one(parts, spec, rel) for parts, spec in self._alternatives)
        return hit != self.negated


def compile_patterns(patterns: Iterable[str], dot: bool = False) -> List[GlobPattern]:
    return [GlobPattern(p, dot=dot) for p in patterns]


def _matches_any(globs: Sequence[GlobPattern], rel: str) -> bool:
    return any(g.match(rel) for g in globs)


def match_paths(paths: Sequence[str], pattern: str) -> List[str]:
    """Return the entries of *paths* matching *pattern*, in their original order."""
    glob = GlobPattern(pattern)
    return [p for p in paths if glob.match(p)]


# File discovery
def discover_files(root: Path, config: CodeCopierConfig) -> List[str]:
    """Return sorted relative paths of files under *root* selected by *config*."""
    if not root.exists() or not root.is_dir():
        raise DirectoryNotFoundError(f"Directory not found: {root}", root)

    includes = compile_patterns(config.include)
    excludes = compile_patterns(config.exclude, dot=True)

    def _on_error(err: OSError) -> None:
        failed = err.filename or root
        if isinstance(err, PermissionError):
            raise PermissionDeniedError(f"Permission denied: Cannot access {failed}", failed)
        raise DiscoveryError(f"Error reading directory '{failed}': {err}", failed)

    found = set()
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_on_error):
        current = Path(dirpath)
        for name in filenames:
            full = current / name
            if not full.is_file():
                continue
            rel = full.relative_to(root).as_posix()
            if not _matches_any(includes, rel):
                continue
            if _matches_any(excludes, rel):
                continue
            found.add(rel)
    return sorted(found)


# Output assembly
OUTPUT_TITLE = "# CodeCopier Output"

LANGUAGE_MAP: Dict[str, str] = {
    "js": "javascript",
    "ts": "typescript",
    "py": "python",
    "java": "java",
    "c": "c",
    "cpp": "cpp",
    "h": "cpp",
    "hpp": "cpp",
    "css": "css",
    "html": "html",
}


def language_for(path: str | Path) -> str:
    return LANGUAGE_MAP.get(Path(path).suffix[1:].lower(), "")


def collect_code(root: Path, selected: Sequence[str], verbose: bool = False) -> str:
    """Render *selected* files as one Markdown document of fenced blocks."""
    echo("Collecting code...", Fore.BLUE)
    sections = [f"{OUTPUT_TITLE}\n\n"]
    for idx, rel in enumerate(selected, start=1):
        debug(f"Processing file {idx}/{len(selected)}: {rel}", verbose)
        full = root / rel
        try:
            raw = full.read_bytes()
        except OSError as e:
            raise FileReadError(f"Could not read '{rel}': {e}", rel)
        text = raw.decode("utf-8", errors="replace")
        sections.append(f"## File: {rel}\n\n")
        sections.append(f"```{language_for(rel)}\n{text}\n```\n\n")
    echo("All files processed", Fore.GREEN)
    return "".join(sections)


# Output writer
def write_output(content: str, out_path: Path, compress: bool = False) -> Path:
    """Write *content* to *out_path*, or gzip it to ``<out_path>.gz``."""
    target = out_path.with_name(out_path.name + ".gz") if compress else out_path

    if not target.parent.exists():
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(f"Could not create directory '{target.parent}': {e}", target.parent)

    if compress:
        try:
            payload = gzip.compress(content.encode("utf-8"))
        except (zlib.error, UnicodeEncodeError) as e:
            raise CompressionError(f"Could not compress output: {e}", target)
        try:
            target.write_bytes(payload)
        except OSError as e:
            raise WriteError(f"Could not write to output file '{target}': {e}", target)
        echo(f"Compressed code collected in {target}", Fore.GREEN)
        return target

    try:
        with target.open("w", encoding="utf-8", newline="\n") as out_fh:
            out_fh.write(content)
    except OSError as e:
        raise WriteError(f"Could not write to output file '{target}': {e}", target)
    echo(f"Code collected in {target}", Fore.GREEN)
    return target
