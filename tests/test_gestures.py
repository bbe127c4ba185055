from pytest import approx

from fishbone.layout import GestureController, ResizeDebouncer


def test_burst_of_resizes_restarts_once(simulator, clock):
    controller = GestureController(simulator, clock=clock)
    simulator.run()
    restarts_before = simulator.context.restarts

    for _ in range(5):
        controller.resize(1024, 768)
        assert not controller.poll()
        clock.advance(0.02)

    clock.advance(0.2)
    assert controller.poll()
    assert not controller.poll()
    assert simulator.context.restarts == restarts_before + 1
    assert simulator.active


def test_spaced_resizes_restart_separately(simulator, clock):
    controller = GestureController(simulator, clock=clock)
    fired = 0
    for _ in range(3):
        controller.resize(900, 700)
        clock.advance(0.25)
        fired += controller.poll()
    assert fired == 3


def test_resize_updates_viewport_immediately(simulator, clock):
    controller = GestureController(simulator, clock=clock)
    controller.resize(1000, 400)
    assert simulator.context.viewport == (1000.0, 400.0)
    simulator.run()
    graph = simulator.graph
    assert graph.position(graph.tail_ref) == approx((50.0, 200.0))
    assert graph.position(graph.ref_by_name("b"))[1] == approx(350.0, abs=0.1)


def test_debouncer_waits_for_quiet_period(clock):
    debouncer = ResizeDebouncer(0.2, clock)
    assert not debouncer.poll()
    debouncer.trigger()
    clock.advance(0.15)
    assert not debouncer.poll()
    clock.advance(0.1)
    assert debouncer.poll()


def test_drag_pins_and_clamps(simulator, clock):
    controller = GestureController(simulator, clock=clock)
    graph = simulator.graph
    ref = graph.ref_by_name("a1")
    simulator.run()

    controller.drag_start(ref, 300.0, 200.0)
    assert simulator.context.dragging
    assert graph.is_pinned(ref)
    assert simulator.alpha == 1.0

    controller.drag_move(ref, 950.0, -40.0)
    assert graph.position(ref) == approx((800.0, 0.0))
    simulator.step()
    assert graph.position(ref) == approx((800.0, 0.0))

    controller.drag_end(ref)
    assert not graph.is_pinned(ref)
    assert not simulator.context.dragging


def test_pinned_node_survives_constraints(simulator, clock):
    controller = GestureController(simulator, clock=clock)
    graph = simulator.graph
    ref = graph.ref_by_name("b")
    controller.drag_start(ref, 400.0, 300.0)
    simulator.context.dragging = False
    simulator.step()
    assert graph.position(ref) == approx((400.0, 300.0))


def test_click_releases_pinned_node(simulator, clock):
    controller = GestureController(simulator, clock=clock)
    graph = simulator.graph
    ref = graph.ref_by_name("c")
    simulator.run()
    assert not controller.click(ref)

    graph.pin(ref, 100.0, 100.0)
    assert controller.click(ref)
    assert not graph.is_pinned(ref)
    assert simulator.alpha == 1.0
