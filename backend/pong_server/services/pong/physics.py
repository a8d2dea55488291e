"""Per-tick ball and paddle physics.

Pure functions over :class:`~pong_server.models.Ball` and
:class:`~pong_server.models.Paddle`. Collisions are resolved at discrete
positions once per tick; there is no swept test, so at very high speeds a ball
could pass through a paddle between two ticks. At the shipped speed and tick
rate the ball moves far less than a paddle's width per tick.
"""

import random

from pong_server.constants import (
    GAME_HEIGHT,
    GAME_WIDTH,
    INITIAL_BALL_SPEED,
    MAX_BOUNCE_DY,
    MAX_SERVE_DY,
    MIN_BALL_DY,
)
from pong_server.models import Ball, Paddle

LEFT = 'left'
RIGHT = 'right'


def serve_dx(rng=random) -> float:
    return rng.choice((-1.0, 1.0))


def serve_dy(rng=random) -> float:
    """Random vertical direction with MIN_BALL_DY <= |dy| <= MAX_SERVE_DY.

    Rejection sampled so a serve is never (close to) perfectly horizontal.
    """
    while True:
        dy = rng.uniform(-MAX_SERVE_DY, MAX_SERVE_DY)
        if abs(dy) >= MIN_BALL_DY:
            return dy


def advance(ball: Ball) -> None:
    ball.x += ball.dx * ball.speed
    ball.y += ball.dy * ball.speed


def wall_bounce(ball: Ball) -> bool:
    """Reflect off the top/bottom walls; return True if the ball left the field.

    The ball is not clamped horizontally on a scoring exit since the caller
    resets it.
    """
    if ball.y - ball.radius < 0:
        ball.y = ball.radius
        ball.dy = abs(ball.dy)
    elif ball.y + ball.radius > GAME_HEIGHT:
        ball.y = GAME_HEIGHT - ball.radius
        ball.dy = -abs(ball.dy)

    return ball.x - ball.radius < 0 or ball.x + ball.radius > GAME_WIDTH


def exit_side(ball: Ball) -> str:
    """Side of the field the ball left through (only meaningful after a score)."""
    return LEFT if ball.x < GAME_WIDTH / 2 else RIGHT


def overlaps(ball: Ball, paddle: Paddle) -> bool:
    return (
        ball.x - ball.radius < paddle.x + paddle.width
        and ball.x + ball.radius > paddle.x
        and ball.y - ball.radius < paddle.y + paddle.height
        and ball.y + ball.radius > paddle.y
    )


def paddle_collision(ball: Ball, paddle: Paddle) -> bool:
    """Bounce the ball off ``paddle`` if their bounding boxes overlap.

    The outgoing vertical direction depends on where the ball struck the
    paddle: the centre sends it straight back, the edges at up to
    ``MAX_BOUNCE_DY``. The ball is moved flush against the face it now
    travels away from so the same hit is not detected again next tick.
    """
    if not overlaps(ball, paddle):
        return False

    offset = (ball.y - paddle.center_y) / (paddle.height / 2)
    offset = max(-1.0, min(1.0, offset))
    ball.dy = offset * MAX_BOUNCE_DY

    ball.dx = -ball.dx
    if ball.dx > 0:
        ball.x = paddle.x + paddle.width + ball.radius
    else:
        ball.x = paddle.x - ball.radius
    return True


def reset_ball(ball: Ball, rng=random) -> None:
    ball.x = GAME_WIDTH / 2
    ball.y = GAME_HEIGHT / 2
    ball.speed = INITIAL_BALL_SPEED
    ball.dx = serve_dx(rng)
    ball.dy = serve_dy(rng)


def move_paddle(paddle: Paddle, delta: float) -> None:
    paddle.y = clamp_paddle_y(paddle.y + delta, paddle.height)


def clamp_paddle_y(y: float, height: float) -> float:
    return max(0.0, min(float(GAME_HEIGHT - height), y))
