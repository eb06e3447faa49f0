"""Tests for the operation registry."""

import pytest

from topomap.engine.context import PipelineContext
from topomap.engine.registry import OperationRegistry, OperationSpec, Phase, get_registry


def _noop(ctx: PipelineContext) -> None:
    pass


def test_register_and_get():
    reg = OperationRegistry()
    spec = OperationSpec(id="dissolve", phase=Phase.STRUCTURE, fn=_noop)
    reg.register(spec)
    assert reg.get("dissolve") is spec
    assert reg.count == 1


def test_duplicate_id_rejected():
    reg = OperationRegistry()
    reg.register(OperationSpec(id="a", phase=Phase.GEOMETRY, fn=_noop))
    with pytest.raises(ValueError, match="Duplicate"):
        reg.register(OperationSpec(id="a", phase=Phase.OUTPUT, fn=_noop))


def test_unknown_id():
    with pytest.raises(ValueError, match="Unknown operation"):
        OperationRegistry().get("missing")


def test_get_phase():
    reg = OperationRegistry()
    reg.register(OperationSpec(id="transform", phase=Phase.GEOMETRY, fn=_noop))
    reg.register(OperationSpec(id="split", phase=Phase.STRUCTURE, fn=_noop))
    reg.register(OperationSpec(id="dissolve", phase=Phase.STRUCTURE, fn=_noop))
    structure = reg.get_phase(Phase.STRUCTURE)
    assert [s.id for s in structure] == ["dissolve", "split"]


def test_resolve_order_with_deps():
    reg = OperationRegistry()
    reg.register(OperationSpec(id="transform", phase=Phase.GEOMETRY, fn=_noop))
    reg.register(
        OperationSpec(id="bounds", phase=Phase.OUTPUT, fn=_noop, dependencies=["transform"])
    )
    reg.register(OperationSpec(id="other", phase=Phase.GEOMETRY, fn=_noop))
    order = reg.resolve_order({"bounds"})
    assert [s.id for s in order] == ["transform", "bounds"]


def test_resolve_order_all_by_phase_then_id():
    reg = OperationRegistry()
    reg.register(OperationSpec(id="b_out", phase=Phase.OUTPUT, fn=_noop))
    reg.register(OperationSpec(id="z_geom", phase=Phase.GEOMETRY, fn=_noop))
    reg.register(OperationSpec(id="a_struct", phase=Phase.STRUCTURE, fn=_noop))
    reg.register(OperationSpec(id="a_geom", phase=Phase.GEOMETRY, fn=_noop))
    order = reg.resolve_order(None)
    assert [s.id for s in order] == ["a_geom", "z_geom", "a_struct", "b_out"]


def test_dependency_overrides_phase_order():
    reg = OperationRegistry()
    reg.register(OperationSpec(id="late", phase=Phase.GEOMETRY, fn=_noop, dependencies=["early"]))
    reg.register(OperationSpec(id="early", phase=Phase.OUTPUT, fn=_noop))
    assert [s.id for s in reg.resolve_order(None)] == ["early", "late"]


def test_cycle_detected():
    reg = OperationRegistry()
    reg.register(OperationSpec(id="a", phase=Phase.GEOMETRY, fn=_noop, dependencies=["b"]))
    reg.register(OperationSpec(id="b", phase=Phase.GEOMETRY, fn=_noop, dependencies=["a"]))
    with pytest.raises(ValueError, match="Circular"):
        reg.resolve_order(None)


def test_requested_unknown_id():
    with pytest.raises(ValueError, match="Unknown operation"):
        OperationRegistry().resolve_order({"nope"})


def test_builtin_operations_registered():
    import topomap.engine.operations  # noqa: F401

    reg = get_registry()
    ids = {s.id for s in reg.all()}
    assert {"transform", "dissolve", "split", "bounds", "export_copy"} <= ids
    assert reg.get("transform").phase is Phase.GEOMETRY
    assert reg.get("bounds").phase is Phase.OUTPUT
