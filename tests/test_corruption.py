import pytest

from gridfall.config import GameConfig
from gridfall.events.bus import EventBus, EVENT_CORRUPTION_RISE, EVENT_GAME_OVER
from gridfall.systems.board_ops import get_game_state
from gridfall.systems.corruption import CorruptionSystem
from tests.helpers import drive, make_engine, make_world, put


def test_rises_with_time_and_level():
    world = make_world()
    corruption = CorruptionSystem(world, EventBus())
    assert corruption.advance(10.0) == pytest.approx(0.1)
    get_game_state(world).level = 3
    assert corruption.advance(10.0) == pytest.approx(0.4)


def test_clamped_below_headroom():
    world = make_world(10, 20)
    corruption = CorruptionSystem(world, EventBus())
    assert corruption.advance(1_000_000.0) == 15.0


def test_push_back_never_goes_negative():
    world = make_world()
    corruption = CorruptionSystem(world, EventBus())
    get_game_state(world).corruption_level = 0.8
    assert corruption.push_back() == pytest.approx(0.3)
    assert corruption.push_back() == 0.0


def test_boundary_needs_a_whole_row():
    world = make_world(10, 20)
    corruption = CorruptionSystem(world, EventBus())
    state = get_game_state(world)
    state.corruption_level = 0.9
    assert corruption.boundary_row() is None
    state.corruption_level = 2.4
    assert corruption.boundary_row() == 17


def test_collision_against_occupied_rows():
    world = make_world(10, 20)
    corruption = CorruptionSystem(world, EventBus())
    put(world, [(3, 16)])
    state = get_game_state(world)
    state.corruption_level = 2.0
    assert not corruption.collides()
    state.corruption_level = 3.0
    assert corruption.collides()


def test_tick_announces_rise_until_collision():
    world = make_world(10, 20)
    bus = EventBus()
    corruption = CorruptionSystem(world, bus)
    rises = []
    bus.subscribe(EVENT_CORRUPTION_RISE, lambda sender, **p: rises.append(p["level"]))
    assert not corruption.tick(1.0)
    assert rises == [pytest.approx(0.01)]

    put(world, [(0, 19)])
    get_game_state(world).corruption_level = 1.0
    assert corruption.tick(0.0)
    assert len(rises) == 1


def test_engine_ends_game_on_corruption():
    engine = make_engine(corruption_rate=1.0)
    engine.start_new_game()
    overs = []
    engine.event_bus.subscribe(EVENT_GAME_OVER, lambda sender, **p: overs.append(p["reason"]))

    drive(engine, 2.0)

    state = engine.get_state()
    assert state.game_over and state.game_over_reason == "corruption"
    assert overs == ["corruption"]


def test_config_rejects_boards_without_headroom():
    with pytest.raises(ValueError):
        GameConfig(rows=5)
    with pytest.raises(ValueError):
        GameConfig(cols=4)
    with pytest.raises(ValueError):
        GameConfig(time_limit=0)
    with pytest.raises(ValueError):
        GameConfig(corruption_rate=-0.1)
