"""Tests for DagNode."""

import pytest

from dag import DagNode, FrozenNodeError, evaluate_readiness


def _boom():
    raise RuntimeError("flag store unavailable")


def _chain(length):
    """s0 <- s1 <- ... <- s{length-1}"""
    nodes = {"s0": DagNode("s0", "S0")}
    for i in range(1, length):
        nodes[f"s{i}"] = DagNode(f"s{i}", f"S{i}").depends_on(f"s{i - 1}")
    return nodes


def _layered_diamond(layers, calls):
    """``layers`` rows of two nodes, each depending on both nodes of the row below."""
    def counted(node_id):
        def check():
            calls[node_id] = calls.get(node_id, 0) + 1
            return True
        return check

    nodes = {}
    below = []
    for layer in range(layers):
        row = []
        for side in ("l", "r"):
            node_id = f"{side}{layer}"
            nodes[node_id] = DagNode(node_id, node_id, dependencies=below, condition=counted(node_id))
            row.append(node_id)
        below = row
    top = DagNode("top", "top", dependencies=below, condition=counted("top"))
    nodes["top"] = top
    return nodes, top


class TestDependencies:
    """Tests for declaring and querying dependencies."""

    def test_dependencies_are_deduplicated_by_id(self):
        """Adding the same id twice keeps a single dependency."""
        a = DagNode("a", "A")
        other_a = DagNode("a", "also A")
        b = DagNode("b", "B").depends_on(a, other_a, "a")

        assert b.dependency_ids == ["a"]

    def test_dependencies_keep_declaration_order(self):
        """Dependency ids come back in the order they were declared."""
        node = DagNode("n", "N", dependencies=["z", "x", "y"])
        assert node.dependency_ids == ["z", "x", "y"]

    def test_frozen_node_rejects_new_dependencies(self):
        """A frozen node cannot gain dependencies."""
        node = DagNode("n", "N")
        node.freeze()

        with pytest.raises(FrozenNodeError):
            node.add_dependency("other")
        assert node.dependency_ids == []

    def test_is_dependent_on_direct_and_transitive(self):
        """Direct and transitive dependencies are both detected."""
        a = DagNode("a", "A")
        b = DagNode("b", "B").depends_on(a)
        c = DagNode("c", "C").depends_on(b)
        nodes = {"a": a, "b": b, "c": c}

        assert c.is_dependent_on(b, nodes)
        assert c.is_dependent_on("a", nodes)
        assert not a.is_dependent_on(c, nodes)
        assert not b.is_dependent_on(c, nodes)

    def test_is_dependent_on_unresolved_id(self):
        """An id not in the mapping still counts as a direct dependency."""
        b = DagNode("b", "B").depends_on("ghost")
        assert b.is_dependent_on("ghost", {})
        assert not b.is_dependent_on("other", {})

    def test_equality_and_hash_by_id(self):
        """Nodes compare and hash by id only."""
        assert DagNode("a", 1) == DagNode("a", 2)
        assert DagNode("a", 1) != DagNode("b", 1)
        assert len({DagNode("a", 1), DagNode("a", 2)}) == 1


class TestReadiness:
    """Tests for is_ready and check_condition."""

    def test_no_condition_is_ready(self):
        node = DagNode("a", "A")
        assert node.check_condition()
        assert node.is_ready({"a": node})

    def test_unready_dependency_blocks_dependent(self):
        """A node is never ready while a dependency is not ready."""
        a = DagNode("a", "A", condition=lambda: False)
        b = DagNode("b", "B", condition=lambda: True).depends_on(a)
        nodes = {"a": a, "b": b}

        assert b.check_condition()
        assert not b.is_ready(nodes)

    def test_transitive_dependency_blocks(self):
        a = DagNode("a", "A", condition=lambda: False)
        b = DagNode("b", "B").depends_on(a)
        c = DagNode("c", "C").depends_on(b)
        assert not c.is_ready({"a": a, "b": b, "c": c})

    def test_own_condition_false_is_not_ready(self):
        a = DagNode("a", "A")
        b = DagNode("b", "B").depends_on(a).when(lambda: False)
        assert not b.is_ready({"a": a, "b": b})

    def test_missing_dependency_is_not_ready(self):
        b = DagNode("b", "B").depends_on("ghost")
        assert not b.is_ready({"b": b})

    def test_condition_reads_live_state(self):
        """Conditions are evaluated on every call."""
        state = {"on": False}
        node = DagNode("a", "A", condition=lambda: state["on"])
        assert not node.check_condition()
        state["on"] = True
        assert node.check_condition()

    def test_failing_condition_is_not_ready(self):
        """A condition that raises counts as not ready."""
        node = DagNode("a", "A", condition=_boom)
        assert not node.check_condition()
        assert not node.is_ready({"a": node})

    def test_failing_condition_raises_in_strict_mode(self):
        node = DagNode("a", "A", condition=_boom)
        with pytest.raises(RuntimeError):
            node.check_condition(strict=True)

    def test_long_chain_is_ready(self):
        """Readiness of a 2000-node chain is computed without recursion."""
        nodes = _chain(2000)
        assert nodes["s1999"].is_ready(nodes)

        nodes["s0"].when(lambda: False)
        assert not nodes["s1999"].is_ready(nodes)

    def test_layered_diamond_checks_each_condition_once(self):
        """Shared dependencies are evaluated once, not once per path."""
        calls = {}
        nodes, top = _layered_diamond(30, calls)

        assert top.is_ready(nodes)
        assert len(calls) == 61
        assert set(calls.values()) == {1}

    def test_evaluate_readiness_snapshot(self, diamond):
        nodes = {n.id: n for n in diamond.get_all_nodes()}
        snapshot = evaluate_readiness(nodes, [diamond.get_node("d")])

        assert snapshot.ready == {"a": True, "b": True, "c": True, "d": True}
        assert snapshot.condition_met["d"]


class TestRenderSubtree:
    """Tests for render_subtree."""

    def test_chain_rendering(self):
        a = DagNode("a", "A")
        b = DagNode("b", "B", condition=lambda: False).depends_on(a)
        text = b.render_subtree({"a": a, "b": b})

        assert text == "└── b (B) ✗\n    └── a (A) ✓\n"

    def test_cycle_is_marked_and_terminates(self):
        """A cycle injected behind the graph's back renders a marker instead of recursing."""
        x = DagNode("x", "X").depends_on("y")
        y = DagNode("y", "Y").depends_on("x")
        text = x.render_subtree({"x": x, "y": y})

        assert text.splitlines() == [
            "└── x (X) ✓",
            "    └── y (Y) ✓",
            "        └── x (cycle)",
        ]

    def test_siblings_do_not_share_visited_marks(self, diamond):
        """A shared dependency reached through two branches is rendered twice, not as a cycle."""
        d = diamond.get_node("d")
        text = d.render_subtree({n.id: n for n in diamond.get_all_nodes()})

        assert "(cycle)" not in text
        assert text.count("a (A)") == 2
        assert text.splitlines()[1].startswith("    ├── b")
        assert text.splitlines()[3].startswith("    └── c")

    def test_missing_dependency_is_marked(self):
        b = DagNode("b", "B").depends_on("ghost")
        assert "ghost (missing)" in b.render_subtree({"b": b})

    def test_long_chain_renders(self):
        nodes = _chain(2000)
        lines = nodes["s1999"].render_subtree(nodes).splitlines()

        assert len(lines) == 2000
        assert lines[0] == "└── s1999 (S1999) ✓"
        assert lines[-1].endswith("└── s0 (S0) ✓")
