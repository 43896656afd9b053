from __future__ import annotations

from inkwell.app.services.categories import ROOT, Category, CategoryTree


def test_tree_starts_with_root_only() -> None:
    tree = CategoryTree("Everything")

    assert len(tree) == 1
    assert tree.root == Category(ROOT, "Everything")
    assert tree.root.parent_id is None
    assert tree.get_category("/") is tree.root


def test_adding_category_creates_ancestors() -> None:
    tree = CategoryTree()

    category = tree.add_category("tech/python", "Python")

    assert category == Category("/tech/python", "Python")
    assert category.parent_id == "/tech"
    assert category.depth == 2
    assert "/tech" in tree
    assert tree.get_category("/tech").name == "tech"  # type: ignore[union-attr]
    assert [child.id for child in tree.get_children("/tech")] == ["/tech/python"]


def test_adding_existing_category_returns_it() -> None:
    tree = CategoryTree()
    first = tree.add_category("/tech", "Technology")

    assert tree.add_category("/tech/", "Other") is first
    assert tree.add_category(None) is tree.root  # type: ignore[arg-type]


def test_removing_category_removes_descendants() -> None:
    tree = CategoryTree()
    tree.add_category("/tech/python")
    tree.add_category("/tech/go")
    tree.add_category("/technology")

    assert tree.remove_category("/tech") is True
    assert [category.id for category in tree.get_categories()] == ["/", "/technology"]
    assert tree.remove_category("/tech") is False
    assert tree.remove_category("/") is False
