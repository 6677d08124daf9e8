"""Tag set algebra and context inheritance tests."""

from __future__ import annotations

from codetag.scanner.context import Context, ContextStore, TagSet, namespace_tags


def test_tag_set_merge_is_idempotent_and_commutative() -> None:
    """Order and repetition of inserts should not change membership."""
    first = TagSet()
    first.update(["go", "py"])
    first.update(["py"])
    second = TagSet()
    second.add("py")
    second.update(["go", "go"])

    assert first == second
    assert len(first) == 2
    assert list(first) == ["go", "py"]


def test_tag_set_reset_replaces_contents() -> None:
    """Reset should discard accumulated tags before inserting new ones."""
    tags = TagSet(["svn", "old"])
    tags.reset(["git"])
    assert tags == {"git"}
    tags.reset()
    assert not tags


def test_qualified_tags_use_namespace_prefix() -> None:
    """Namespaced tags are prefixed; the empty namespace stays bare."""
    tags = TagSet(["py", "go"])
    assert tags.qualified("lang") == ["lang:go", "lang:py"]
    assert tags.qualified("") == ["go", "py"]


def test_namespace_always_carries_tags() -> None:
    """Namespace contexts are created with an empty tag set."""
    context = Context(["scm"])
    ns_context = context.namespace("scm")
    assert isinstance(ns_context["tags"], TagSet)
    assert not namespace_tags(ns_context)
    assert context.tags("other") == set()
    assert context.namespaces() == ["scm", "other"]


def test_flatten_sorts_namespaces_and_tags() -> None:
    """Flattened output is deterministic."""
    context = Context()
    context.tags("scm").add("git")
    context.tags("lang").update(["md", "go"])
    context.tags("").add("bare")
    assert context.flatten() == ["bare", "lang:go", "lang:md", "scm:git"]


def test_root_context_is_seeded_with_namespaces(tmp_path) -> None:  # type: ignore[no-untyped-def]
    """A path without a parent context gets a fresh, empty context."""
    store = ContextStore(["scm", "lang"])
    context = store.resolve(tmp_path)
    assert context.namespaces() == ["scm", "lang"]
    assert context.flatten() == []
    assert tmp_path in store
    assert store.resolve(tmp_path) is context


def test_child_clones_parent_by_value(tmp_path) -> None:  # type: ignore[no-untyped-def]
    """Child starts equal to the parent but mutations never flow back."""
    store = ContextStore(["scm"])
    parent = store.resolve(tmp_path)
    parent.tags("scm").add("git")
    parent.namespace("scm")["remote"] = {"hosts": ["github.com"]}

    child = store.resolve(tmp_path / "src")
    assert child == parent
    assert child is not parent

    child.tags("scm").add("hg")
    child.namespace("scm")["remote"]["hosts"].append("example.org")

    assert parent.tags("scm") == {"git"}
    assert parent.namespace("scm")["remote"] == {"hosts": ["github.com"]}


def test_siblings_are_isolated(tmp_path) -> None:  # type: ignore[no-untyped-def]
    """Mutating one sibling's context never shows up in the other."""
    store = ContextStore(["lang"])
    store.resolve(tmp_path).tags("lang").add("inherited")

    left = store.resolve(tmp_path / "left")
    right = store.resolve(tmp_path / "right")
    left.tags("lang").reset(["py"])

    assert right.tags("lang") == {"inherited"}
    assert left.tags("lang") == {"py"}


def test_only_direct_parent_is_consulted(tmp_path) -> None:  # type: ignore[no-untyped-def]
    """A grandchild whose parent was never visited starts empty."""
    store = ContextStore(["lang"])
    store.resolve(tmp_path).tags("lang").add("py")

    grandchild = store.resolve(tmp_path / "a" / "b")

    assert grandchild.tags("lang") == set()
    assert len(store) == 2
