"""Tests for the component tree model."""

import os

from spawner.dsl import component
from spawner.model import Component, State
from spawner.runner import plan
from spawner.tee import Tee


def test_defaults():
    c = Component()
    assert c.entrypoint == []
    assert c.cmd == []
    assert c.before == [] and c.after == []
    assert isinstance(c.tee, Tee)
    assert c.state is State.UNPOPULATED
    assert not c.populated
    assert c.process is None


def test_children_are_not_shared_between_instances():
    a, b = Component(), Component()
    a.before.append(Component(cmd=["x"]))
    assert b.before == []


def test_display_and_log_name():
    c = Component(entrypoint=["python", "-m"], cmd=["http.server", "8000"])
    assert c.invocation == ["python", "-m", "http.server", "8000"]
    assert c.display_name == "python -m http.server 8000"
    assert str(c) == c.display_name
    assert c.log_name == "python_-m_http.server_8000"


def test_log_name_strips_path_separators():
    c = Component(entrypoint=["/usr/bin/env"], cmd=["echo", "a b"])
    assert "/" not in c.log_name
    assert c.log_name == "_usr_bin_env_echo_a_b"


def test_empty_display_name():
    assert Component().display_name == "<empty>"


def test_add_prefix_recurses_into_every_node():
    leaf = Component(cmd=["leaf"], workdir="deep")
    root = Component(
        cmd=["root"],
        workdir="r",
        before=[Component(cmd=["b"], workdir="b", before=[leaf])],
        after=[Component(cmd=["a"])],
    )

    root.add_prefix("base")

    assert root.workdir == os.path.join("base", "r")
    assert root.before[0].workdir == os.path.join("base", "b")
    assert leaf.workdir == os.path.join("base", "deep")
    assert root.after[0].workdir == os.path.join("base", "")
    assert all(node.prefix == "base" for node in root.walk())


def test_add_prefix_twice_doubles_prefix():
    c = Component(cmd=["x"], workdir="w")
    c.add_prefix("p")
    c.add_prefix("p")
    assert c.workdir == os.path.join("p", "p", "w")


def test_walk_and_plan_order():
    tree = component(
        "A",
        before=[component("B1", before=[component("B0")]), component("B2")],
        after=[component("C1", after=[component("C2")])],
    )
    assert plan(tree) == ["B0", "B1", "B2", "A", "C1", "C2"]
    assert [n.display_name for n in tree.walk()] == plan(tree)


def test_template_context_exposes_declared_fields():
    c = Component(entrypoint=["e"], cmd=["c"], depends="db", workdir="w")
    ctx = c.template_context()
    assert ctx["entrypoint"] == ["e"]
    assert ctx["cmd"] == ["c"]
    assert ctx["depends"] == "db"
    assert ctx["workdir"] == "w"
    assert "process" not in ctx
