# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
from typing import Tuple

try:
    import pygame
except Exception:
    pygame = None

from pitchmind.engine.role_catalog import (
    CENTRAL_MIDFIELDER_1,
    CENTRAL_MIDFIELDER_2,
    GOALKEEPER,
    LEFT_BACK,
    RIGHT_BACK,
    STRIKER,
)
from pitchmind.engine.spatial import Vector3
from pitchmind.sandbox.world import DemoMatch

ROLE_LABELS = {
    GOALKEEPER: "GK",
    LEFT_BACK: "LB",
    RIGHT_BACK: "RB",
    CENTRAL_MIDFIELDER_1: "CM",
    CENTRAL_MIDFIELDER_2: "CM",
    STRIKER: "ST",
}


def start_visualizer(
    match: DemoMatch,
    screen_size: Tuple[int, int] = (1050, 700),
    fps: int = 30,
    duration: float = 0.0,
) -> None:
    """Run a sandbox match in a pygame window, one physics frame per draw.

    If `pygame` is not installed the function will return immediately.

    Parameters
    ----------
    match : DemoMatch
        Match to step and draw.
    screen_size : Tuple[int, int], default=(1050, 700)
        Initial window size in pixels.
    fps : int, default=30
        Frame rate cap; each frame advances the match by ``1000 / fps`` ms.
    duration : float, default=0.0
        Simulated seconds after which the window closes; ``0`` runs until
        the window is closed or ``q`` is pressed.
    """
    if pygame is None:
        return

    pygame.init()
    screen = pygame.display.set_mode(screen_size, pygame.RESIZABLE)
    pygame.display.set_caption("Pitchmind Sandbox")
    clock = pygame.time.Clock()

    # Colors
    GREEN = (38, 160, 72)
    LINE = (245, 245, 245)
    RED = (200, 30, 30)
    BLUE = (30, 90, 200)
    BALL = (245, 245, 245)
    GOAL_FRAME = (250, 250, 100)
    TARGET = (255, 255, 255)
    TEXT = (20, 20, 20)

    font = pygame.font.SysFont(None, 18)

    ctx = match.ctx
    pitch = ctx.config.pitch
    length = pitch.max_x - pitch.min_x
    width = pitch.max_z - pitch.min_z
    frame_ms = 1000.0 / fps
    paused = False
    running = True

    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_q:
                    running = False
                elif event.key == pygame.K_SPACE:
                    paused = not paused
            elif event.type == pygame.VIDEORESIZE:
                screen_size = (event.w, event.h)
                screen = pygame.display.set_mode(screen_size, pygame.RESIZABLE)

        if not paused:
            match.step(frame_ms)
            if duration and ctx.match_time >= duration:
                running = False

        screen.fill((0, 0, 0))

        margin = 16
        pitch_rect = pygame.Rect(margin, margin, screen_size[0] - 2 * margin, screen_size[1] - 2 * margin)
        _pr_left, _pr_top = pitch_rect.left, pitch_rect.top
        _pr_w, _pr_h = pitch_rect.width, pitch_rect.height

        def w2s(
            pos: Vector3,
            left: int = _pr_left,
            top: int = _pr_top,
            pw: int = _pr_w,
            ph: int = _pr_h,
        ) -> Tuple[int, int]:
            """Map world X/Z onto the pitch rectangle.

            Parameters
            ----------
            pos : Vector3
                World position; height is ignored.
            left : int
                Left edge of the pitch rectangle.
            top : int
                Top edge of the pitch rectangle.
            pw : int
                Pitch rectangle width.
            ph : int
                Pitch rectangle height.

            Returns
            -------
            Tuple[int, int]
                Screen coordinates.
            """
            sx = int((pos.x - pitch.min_x) / length * pw) + left
            sy = int((pitch.max_z - pos.z) / width * ph) + top
            return sx, sy

        pygame.draw.rect(screen, GREEN, pitch_rect)
        pygame.draw.rect(screen, LINE, pitch_rect, 4)

        center = w2s(Vector3(pitch.center_x, 0.0, pitch.center_z))
        pygame.draw.line(screen, LINE, (center[0], pitch_rect.top), (center[0], pitch_rect.bottom), 2)
        pygame.draw.circle(screen, LINE, center, int(9.15 / length * pitch_rect.width), 2)

        # Goal mouths and penalty arcs
        for goal_x in (pitch.red_goal_line_x, pitch.blue_goal_line_x):
            top = w2s(Vector3(goal_x, 0.0, pitch.center_z + pitch.goal_half_width))
            bottom = w2s(Vector3(goal_x, 0.0, pitch.center_z - pitch.goal_half_width))
            pygame.draw.line(screen, GOAL_FRAME, top, bottom, 6)
            goal_center = w2s(Vector3(goal_x, 0.0, pitch.center_z))
            radius = int(pitch.penalty_area_radius / length * pitch_rect.width)
            pygame.draw.circle(screen, LINE, goal_center, radius, 1)

        for agent in match.agents:
            pos = ctx.position_of(agent)
            if pos is None:
                continue
            sx, sy = w2s(pos)
            color = RED if agent.team == "red" else BLUE
            radius = 11 if agent.role == GOALKEEPER else 9
            if agent.has_ball:
                pygame.draw.circle(screen, (255, 215, 0), (sx, sy), radius + 4)
            pygame.draw.circle(screen, color, (sx, sy), radius)
            if agent.target_position is not None:
                pygame.draw.line(screen, TARGET, (sx, sy), w2s(agent.target_position), 1)
            txt = font.render(ROLE_LABELS[agent.role], True, TEXT)
            screen.blit(txt, (sx - txt.get_width() // 2, sy - txt.get_height() // 2))

        ball_pos = ctx.ball_position()
        if ball_pos is not None:
            pygame.draw.circle(screen, BALL, w2s(ball_pos), 6)

        # HUD: time, score and decision system
        score = match.world.score
        hud = [
            f"Red {score['red']} - {score['blue']} Blue",
            f"Time: {int(ctx.match_time // 60):02d}:{int(ctx.match_time % 60):02d}",
            f"Decisions: {ctx.state.decision_system}" + ("  [paused]" if paused else ""),
        ]
        for idx, line in enumerate(hud):
            screen.blit(font.render(line, True, TEXT), (pitch_rect.left + 8, pitch_rect.top + 8 + idx * 20))

        if ctx.debugger is not None:
            recent = ctx.debugger.get_recent_events(limit=6)
            if recent:
                line_height = font.get_linesize()
                panel_height = line_height * len(recent) + 12
                panel = pygame.Surface((screen_size[0], panel_height), pygame.SRCALPHA)
                panel.fill((0, 0, 0, 140))
                screen.blit(panel, (0, screen_size[1] - panel_height))
                base_y = screen_size[1] - panel_height + 6
                for idx, entry in enumerate(recent):
                    screen.blit(font.render(entry[:140], True, (235, 235, 235)), (12, base_y + idx * line_height))

        pygame.display.flip()
        clock.tick(fps)

    pygame.quit()
