import random

import pytest

from breakout.game import (
    BALL_SPEED,
    HIGHSCORE_KEY,
    SOUND_BOUNCE,
    SOUND_BRICK_HIT,
    SOUND_GAME_OVER,
    BrickGrid,
    GameState,
)
from breakout.storage import MemoryStore


def kill_all_but(session, keep_index: int) -> None:
    for index, brick in enumerate(session.bricks):
        if index != keep_index:
            brick.alive = False


def test_brick_layout_matches_playfield_width(session):
    assert session.grid.brick_width == 70
    assert len(session.bricks) == 30
    assert session.brick_at(0, 0).x == 5
    assert session.brick_at(0, 1).x == 85
    assert session.brick_at(0, 0).y == 30
    assert session.brick_at(1, 0).y == 60
    assert session.brick_at(2, 9).y == 90
    assert all(brick.alive for brick in session.bricks)


def test_grid_for_playfield_derives_brick_width():
    grid = BrickGrid.for_playfield(1000, padding=20, brick_height=15)

    assert grid.brick_width == 80
    assert grid.total == 30
    assert grid.position(1, 2) == (2 * 100 + 10, 1 * 35 + 30)


def test_initial_entities_are_centred(session):
    ball = session.ball
    paddle = session.paddle

    assert ball.x == 400
    assert ball.y == 560
    assert -BALL_SPEED <= ball.dx < BALL_SPEED
    assert ball.dy == -BALL_SPEED
    assert paddle.x == 350
    assert paddle.y == 590
    assert session.score == 0
    assert session.state is GameState.PLAYING


def test_seeded_sessions_start_identically(make_session):
    first = make_session(seed=42)
    second = make_session(seed=42)

    assert first.ball.dx == second.ball.dx
    for _ in range(50):
        first.advance()
        second.advance()
    assert (first.ball.x, first.ball.y, first.ball.dx, first.ball.dy) == (
        second.ball.x,
        second.ball.y,
        second.ball.dx,
        second.ball.dy,
    )


def test_left_wall_bounce_reverses_dx(session, place_ball, audio):
    place_ball(session, x=5, y=300, dx=-3, dy=-4)

    session.advance()

    assert session.ball.dx == 3
    assert session.ball.x == 2
    assert audio.played == [SOUND_BOUNCE]


def test_right_wall_bounce_reverses_dx(session, place_ball):
    place_ball(session, x=788, y=300, dx=3, dy=-4)

    session.advance()

    assert session.ball.dx == -3


def test_ceiling_bounce_reverses_dy(session, place_ball, audio):
    # x=400 sits in the gap between brick columns four and five.
    place_ball(session, x=400, y=12, dx=0, dy=-4)

    session.advance()

    assert session.ball.dy == 4
    assert session.score == 0
    assert audio.played == [SOUND_BOUNCE]


def test_paddle_bounce_is_purely_vertical(session, place_ball, audio):
    place_ball(session, x=440, y=578, dx=2, dy=4)

    session.advance()

    assert session.ball.dy == -4
    assert session.ball.dx == 2
    assert audio.played == [SOUND_BOUNCE]
    assert session.state is GameState.PLAYING


def test_paddle_edge_is_not_a_hit(session, place_ball):
    place_ball(session, x=346, y=578, dx=4, dy=4)

    session.advance()

    # Ball centre lands exactly on paddle.x, which is excluded.
    assert session.ball.x == 350
    assert session.ball.dy == 4


def test_brick_hit_destroys_brick_and_scores(session, place_ball, audio, store):
    place_ball(session, x=40, y=120, dx=0, dy=-4)

    session.advance()

    brick = session.brick_at(2, 0)
    assert not brick.alive
    assert session.score == 1
    assert session.ball.dy == 4
    assert audio.played == [SOUND_BRICK_HIT]
    assert session.highscore == 1
    assert store.get(HIGHSCORE_KEY) == "1"


def test_simultaneous_brick_hits_flip_dy_each_time(session, place_ball, audio):
    # The ball spans y 75..95 after moving, touching rows one and two.
    place_ball(session, x=40, y=89, dx=0, dy=-4)

    session.advance()

    assert not session.brick_at(1, 0).alive
    assert not session.brick_at(2, 0).alive
    assert session.score == 2
    assert session.ball.dy == -4
    assert audio.played == [SOUND_BRICK_HIT, SOUND_BRICK_HIT]


def test_destroyed_brick_is_not_hit_again(session, place_ball):
    session.brick_at(2, 0).alive = False
    place_ball(session, x=40, y=120, dx=0, dy=-4)

    session.advance()

    assert session.score == 0
    assert session.ball.dy == -4


def test_ball_below_bottom_edge_loses(session, place_ball, audio):
    place_ball(session, x=100, y=588, dx=0, dy=4)

    session.advance()

    assert session.state is GameState.LOST
    assert audio.played == [SOUND_GAME_OVER]


def test_advance_is_frozen_after_loss(session, place_ball):
    place_ball(session, x=100, y=588, dx=0, dy=4)
    session.advance()
    position = (session.ball.x, session.ball.y)

    session.advance()

    assert (session.ball.x, session.ball.y) == position


def test_last_brick_wins_on_check(session, place_ball):
    kill_all_but(session, keep_index=20)
    session.score = 29
    place_ball(session, x=40, y=120, dx=0, dy=-4)

    session.advance()
    assert session.score == 30
    assert session.state is GameState.PLAYING

    assert session.check_win()
    assert session.state is GameState.WON


def test_check_win_needs_every_brick(session):
    session.score = 29

    assert not session.check_win()
    assert session.state is GameState.PLAYING


def test_loss_detected_before_win_in_same_frame(make_session, place_ball):
    session = make_session(height=120)
    kill_all_but(session, keep_index=20)
    session.score = 29
    place_ball(session, x=40, y=108, dx=0, dy=4)

    session.advance()

    assert session.score == 30
    assert session.state is GameState.LOST
    assert not session.check_win()


def test_highscore_loaded_from_store(make_session):
    session = make_session(store=MemoryStore({HIGHSCORE_KEY: "12"}))

    assert session.highscore == 12


@pytest.mark.parametrize("raw", ["", "abc", "-3"])
def test_malformed_highscore_defaults_to_zero(make_session, raw):
    session = make_session(store=MemoryStore({HIGHSCORE_KEY: raw}))

    assert session.highscore == 0


def test_highscore_persisted_once_per_increase(make_session, make_store, place_ball):
    store = make_store({HIGHSCORE_KEY: "12"})
    session = make_session(store=store)
    session.score = 12

    place_ball(session, x=40, y=120, dx=0, dy=-4)
    session.advance()
    assert session.score == 13
    assert store.get(HIGHSCORE_KEY) == "13"
    assert store.writes == 1

    place_ball(session, x=400, y=300, dx=0, dy=-4)
    for _ in range(10):
        session.advance()
    assert store.writes == 1

    place_ball(session, x=120, y=120, dx=0, dy=-4)
    session.advance()
    assert store.get(HIGHSCORE_KEY) == "14"
    assert store.writes == 2


def test_score_below_highscore_does_not_write(make_session, make_store, place_ball):
    store = make_store({HIGHSCORE_KEY: "20"})
    session = make_session(store=store)

    place_ball(session, x=40, y=120, dx=0, dy=-4)
    session.advance()

    assert session.score == 1
    assert session.highscore == 20
    assert store.writes == 0


def test_paddle_moves_by_step(session):
    assert session.on_key("left")
    assert session.paddle.x == 342
    assert session.on_key("right")
    assert session.on_key("right")
    assert session.paddle.x == 358


def test_unknown_keys_are_ignored(session):
    assert not session.on_key("up")
    assert not session.on_key("space")
    assert session.paddle.x == 350


def test_paddle_stops_at_walls(session):
    session.paddle.x = 0
    assert not session.on_key("left")
    assert session.paddle.x == 0

    session.paddle.x = 3
    assert session.on_key("left")
    assert session.paddle.x == 0

    session.paddle.x = 700
    assert not session.on_key("right")
    assert session.paddle.x == 700

    session.paddle.x = 695
    assert session.on_key("right")
    assert session.paddle.x == 700


def test_blocked_direction_leaves_other_direction_free(session):
    session.paddle.x = 0
    assert not session.on_key("left")
    assert session.on_key("right")
    assert session.paddle.x == 8

    session.paddle.x = 700
    assert not session.on_key("right")
    assert session.on_key("left")
    assert session.paddle.x == 692


def test_paddle_stays_in_bounds_for_any_key_sequence(session):
    rng = random.Random(3)
    keys = ["left", "right", "up", "x"]
    limit = session.width - session.paddle.width
    for _ in range(2000):
        session.on_key(rng.choice(keys))
        assert 0 <= session.paddle.x <= limit
    for _ in range(100):
        session.on_key("left")
    assert session.paddle.x == 0


def test_input_ignored_after_game_ends(session, place_ball):
    place_ball(session, x=100, y=588, dx=0, dy=4)
    session.advance()

    assert not session.on_key("left")
    assert session.paddle.x == 350


def test_session_invariants_hold_over_long_play(make_session):
    session = make_session(seed=11)
    previous_score = 0
    previous_highscore = session.highscore
    destroyed = set()
    for _ in range(20000):
        # Keep the paddle under the ball so the game lasts.
        session.paddle.x = min(
            max(0, session.ball.x - session.paddle.width / 2),
            session.width - session.paddle.width,
        )
        session.advance()
        session.check_win()

        assert previous_score <= session.score <= session.grid.total
        assert previous_highscore <= session.highscore
        assert session.highscore >= session.score
        for index in destroyed:
            assert not session.bricks[index].alive
        destroyed.update(i for i, brick in enumerate(session.bricks) if not brick.alive)
        previous_score = session.score
        previous_highscore = session.highscore
        if session.state.terminal:
            break

    assert session.score == len(destroyed)


def test_reset_starts_new_game_keeping_highscore(session, place_ball):
    place_ball(session, x=40, y=120, dx=0, dy=-4)
    session.advance()
    place_ball(session, x=100, y=588, dx=0, dy=4)
    session.advance()
    assert session.state is GameState.LOST

    session.reset()

    assert session.state is GameState.PLAYING
    assert session.score == 0
    assert session.highscore == 1
    assert all(brick.alive for brick in session.bricks)
    assert session.paddle.x == 350
    assert session.ball.y == 560
