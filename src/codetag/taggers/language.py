"""Language detection by file extension/path and by shebang line."""

from __future__ import annotations

import logging
import os
import re
import stat
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from codetag.taggers.registry import TaggerConfigError

LOGGER = logging.getLogger(__name__)

# Trailing noise left by editors, VCS merges and templating.
NOISE_SUFFIXES = r"(?:\.(?:bak|orig|old|new|save|tmp|swp|in|dist|example|sample|tpl|tmpl|j2)|~)*"

# Extension rules come first; order only affects tag emission order.
EXTENSION_TAGS: tuple[tuple[str, str], ...] = (
    ("py|pyw|pyi", "py"),
    ("pyx|pxd", "cython"),
    ("go", "go"),
    ("rs", "rust"),
    ("c|h", "c"),
    ("cc|cpp|cxx|c\\+\\+|hh|hpp|hxx", "cpp"),
    ("java", "java"),
    ("kt|kts", "kotlin"),
    ("scala", "scala"),
    ("js|mjs|cjs|jsx", "js"),
    ("ts|tsx", "ts"),
    ("coffee", "coffee"),
    ("rb", "rb"),
    ("pl|pm", "perl"),
    ("php\\d?", "php"),
    ("lua", "lua"),
    ("sh|bash|zsh|ksh", "sh"),
    ("hs|lhs", "haskell"),
    ("ml|mli", "ocaml"),
    ("erl|hrl", "erlang"),
    ("ex|exs", "elixir"),
    ("clj|cljs|cljc", "clojure"),
    ("el", "elisp"),
    ("lisp|cl", "lisp"),
    ("scm|ss", "scheme"),
    ("tcl", "tcl"),
    ("[rR]", "r"),
    ("sql", "sql"),
    ("x?html?", "html"),
    ("css", "css"),
    ("s[ac]ss", "sass"),
    ("xml|xsd|xsl|xslt", "xml"),
    ("json", "json"),
    ("ya?ml", "yaml"),
    ("toml", "toml"),
    ("ini|cfg|conf", "conf"),
    ("md|markdown", "md"),
    ("rst", "rst"),
    ("tex", "tex"),
    ("proto", "proto"),
    ("mk", "make"),
)
PATH_TAGS: tuple[tuple[str, str], ...] = (
    (r"(?:^|/)(?:GNU)?[Mm]akefile$", "make"),
    (r"(?:^|/)CMakeLists\.txt$", "cmake"),
    (r"(?:^|/)Dockerfile(?:\.[^/]+)?$", "docker"),
    (r"(?:^|/)(?:Rakefile|Gemfile)$", "rb"),
    (r"(?:^|/)SCons(?:truct|cript)$", "py"),
    (r"(?:^|/)PKGBUILD$", "sh"),
)
INTERPRETER_TAGS: tuple[tuple[str, str], ...] = (
    (r"python(\d(\.\d+)?)?|pypy\d?", "py"),
    (r"(ba|da|z|k|mk)?sh", "sh"),
    (r"perl\d*", "perl"),
    (r"ruby\d*(\.\d+)?", "rb"),
    (r"node(js)?", "js"),
    (r"php\d*", "php"),
    (r"lua(jit|\d(\.\d+)?)?", "lua"),
    (r"tclsh[\d.]*|wish[\d.]*", "tcl"),
    (r"[gnm]?awk", "awk"),
    (r"Rscript", "r"),
)

SHEBANG_MAX_BYTES = 512


@dataclass(frozen=True)
class PatternTagRule:
    """Compiled pattern and the tag it contributes on match."""

    pattern: re.Pattern[str]
    tag: str


def extension_rule(extensions: str, tag: str) -> PatternTagRule:
    return PatternTagRule(
        pattern=re.compile(rf"\.(?:{extensions}){NOISE_SUFFIXES}$"),
        tag=tag,
    )


def _compile_rules(
    table: Iterable[tuple[str, str]], *, as_extension: bool = False
) -> list[PatternTagRule]:
    rules: list[PatternTagRule] = []
    for pattern, tag in table:
        if as_extension:
            rules.append(extension_rule(pattern, tag))
        else:
            rules.append(PatternTagRule(pattern=re.compile(pattern), tag=tag))
    return rules


DEFAULT_PATH_RULES: tuple[PatternTagRule, ...] = tuple(
    _compile_rules(EXTENSION_TAGS, as_extension=True) + _compile_rules(PATH_TAGS)
)
DEFAULT_INTERPRETER_RULES: tuple[PatternTagRule, ...] = tuple(
    _compile_rules(INTERPRETER_TAGS)
)


def _options(name: str, raw_config: Any, allowed: set[str]) -> Mapping[str, Any]:
    if raw_config is None:
        return {}
    if not isinstance(raw_config, Mapping):
        raise TaggerConfigError(f"{name}: config must be a map, got {raw_config!r}")
    unknown = set(raw_config) - allowed
    if unknown:
        raise TaggerConfigError(f"{name}: unknown option(s): {', '.join(sorted(unknown))}")
    return raw_config


def _table(name: str, options: Mapping[str, Any], key: str) -> list[tuple[str, str]]:
    table = options.get(key) or {}
    if not isinstance(table, Mapping):
        raise TaggerConfigError(f"{name}: '{key}' must be a map of pattern to tag")
    return [(str(pattern), str(tag)) for pattern, tag in table.items()]


def compile_path_rules(name: str, raw_config: Any) -> tuple[PatternTagRule, ...]:
    """Built-in table (unless ``defaults: false``) plus configured extras."""
    options = _options(name, raw_config, {"defaults", "extensions", "paths"})
    try:
        extra_ext = _compile_rules(_table(name, options, "extensions"), as_extension=True)
        extra_paths = _compile_rules(_table(name, options, "paths"))
    except re.error as exc:
        raise TaggerConfigError(f"{name}: bad pattern: {exc}") from exc
    if not options.get("defaults", True):
        return tuple(extra_ext + extra_paths)
    # Configured extension rules keep priority over the built-in path rules.
    ext_count = len(EXTENSION_TAGS)
    return tuple(
        list(DEFAULT_PATH_RULES[:ext_count])
        + extra_ext
        + list(DEFAULT_PATH_RULES[ext_count:])
        + extra_paths
    )


def compile_interpreter_rules(name: str, raw_config: Any) -> tuple[PatternTagRule, ...]:
    options = _options(name, raw_config, {"defaults", "interpreters"})
    try:
        extra = _compile_rules(_table(name, options, "interpreters"))
    except re.error as exc:
        raise TaggerConfigError(f"{name}: bad pattern: {exc}") from exc
    if not options.get("defaults", True):
        return tuple(extra)
    return DEFAULT_INTERPRETER_RULES + tuple(extra)


def tag_by_path(
    name: str,
    rules: tuple[PatternTagRule, ...],
    path: str,
    info: os.stat_result,
    ns_context: dict[str, Any],
) -> list[str]:
    """Every matching rule contributes; duplicates are left to the tag set."""
    if not stat.S_ISREG(info.st_mode):
        return []
    normalized = path.replace(os.sep, "/")
    return [rule.tag for rule in rules if rule.pattern.search(normalized)]


def read_shebang_interpreter(path: str) -> str | None:
    """Interpreter base name from a ``#!`` first line, seeing through ``env``."""
    with open(path, "rb") as handle:
        first_line = handle.readline(SHEBANG_MAX_BYTES)
    if not first_line.startswith(b"#!"):
        return None
    tokens = first_line[2:].decode("utf-8", errors="replace").split()
    if not tokens:
        return None
    interpreter = os.path.basename(tokens[0])
    if interpreter == "env":
        args = [token for token in tokens[1:] if not token.startswith("-") and "=" not in token]
        if not args:
            return None
        interpreter = os.path.basename(args[0])
    return interpreter


def tag_by_shebang(
    name: str,
    rules: tuple[PatternTagRule, ...],
    path: str,
    info: os.stat_result,
    ns_context: dict[str, Any],
) -> list[str]:
    if not stat.S_ISREG(info.st_mode):
        return []
    try:
        interpreter = read_shebang_interpreter(path)
    except OSError as exc:
        LOGGER.debug("%s: cannot read first line of %s: %s", name, path, exc)
        return []
    if not interpreter:
        return []
    return [rule.tag for rule in rules if rule.pattern.fullmatch(interpreter)]
