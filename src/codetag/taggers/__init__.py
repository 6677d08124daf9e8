"""Tagger registry, pipeline and built-in taggers."""

from codetag.taggers.language import (
    compile_interpreter_rules,
    compile_path_rules,
    tag_by_path,
    tag_by_shebang,
)
from codetag.taggers.pipeline import TaggerPipeline
from codetag.taggers.registry import (
    Tagger,
    TaggerConfigError,
    TaggerRegistry,
    UnknownTaggerError,
)
from codetag.taggers.scm import (
    compile_host_rules,
    compile_markers,
    tag_git_remote_hosts,
    tag_hg_remote_hosts,
    tag_scm_root,
)

__all__ = [
    "Tagger",
    "TaggerConfigError",
    "TaggerPipeline",
    "TaggerRegistry",
    "UnknownTaggerError",
    "default_registry",
]


def default_registry() -> TaggerRegistry:
    """Registry holding every built-in tagger type."""
    registry = TaggerRegistry()
    registry.register(
        "scm",
        tag_scm_root,
        compile_markers,
        description="Repository roots (.git, .hg, ...); resets inherited tags.",
    )
    registry.register(
        "lang_path",
        tag_by_path,
        compile_path_rules,
        description="Language by file extension or well-known file name.",
    )
    registry.register(
        "lang_shebang",
        tag_by_shebang,
        compile_interpreter_rules,
        description="Language by #! interpreter on the first line.",
    )
    registry.register(
        "git_remote",
        tag_git_remote_hosts,
        compile_host_rules,
        description="Tag git checkouts whose remotes match host patterns.",
    )
    registry.register(
        "hg_remote",
        tag_hg_remote_hosts,
        compile_host_rules,
        description="Tag hg checkouts whose paths match host patterns.",
    )
    return registry
