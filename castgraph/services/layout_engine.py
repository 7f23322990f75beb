"""Spiral layout for the displayed performers.

Rank i of n is placed on a four-turn spiral: t = i / n, angle = t·8π,
radius = 0.1 + t·0.4, so the highest-ranked performers sit closest to the
centre (0.5, 0.5).  A small jitter on angle and radius breaks up visual
clumps; it carries no meaning, and passing a seeded ``random.Random`` makes
the whole layout reproducible.

Point size grows with log2 of the appearance count.  The top ranks get a
fixed warm colour; everyone else gets a cool hue that drifts with rank and
saturates slightly with appearance count.
"""

from __future__ import annotations

import math
import random
from collections.abc import Sequence

from castgraph.models.performer import Performer
from castgraph.models.universe import PerformerNode
from castgraph.services.graph_builder import TOP_PERFORMER_COUNT

_TURNS_ANGLE = 8 * math.pi
_INNER_RADIUS = 0.1
_RADIUS_SPREAD = 0.4
_JITTER = 0.04
_DEPTH_MIN = 0.25
_DEPTH_SPAN = 0.5

_TOP_HSL = (45, 80, 60)
_COOL_HUE_BASE = 200
_COOL_HUE_SPAN = 40
_MAX_SATURATION = 90
_MAX_LIGHTNESS = 75


def spiral_position(
    index: int,
    total: int,
    rng: random.Random,
) -> tuple[float, float, float]:
    """Return jittered ``(x, y, z)`` for rank *index* of *total*."""
    t = index / total if total else 0.0
    angle = t * _TURNS_ANGLE
    radius = _INNER_RADIUS + t * _RADIUS_SPREAD

    jitter_angle = (rng.random() - 0.5) * _JITTER
    jitter_radius = (rng.random() - 0.5) * _JITTER

    x = 0.5 + math.cos(angle + jitter_angle) * (radius + jitter_radius)
    y = 0.5 + math.sin(angle + jitter_angle) * (radius + jitter_radius)
    z = rng.random() * _DEPTH_SPAN + _DEPTH_MIN
    return x, y, z


def node_size(appearance_count: int) -> float:
    return math.log2(appearance_count + 1) * 10 + 6


def node_color(
    index: int,
    total: int,
    appearance_count: int,
    top_count: int = TOP_PERFORMER_COUNT,
) -> str:
    """CSS ``hsl()`` colour for rank *index*."""
    if index < top_count:
        hue, saturation, lightness = _TOP_HSL
    else:
        t = index / total if total else 0.0
        hue = round(_COOL_HUE_BASE + (1 - t) * _COOL_HUE_SPAN, 2)
        saturation = min(60 + appearance_count * 3, _MAX_SATURATION)
        lightness = min(50 + appearance_count * 2, _MAX_LIGHTNESS)
    return f"hsl({hue:g}, {saturation:g}%, {lightness:g}%)"


def layout_performers(
    displayed: Sequence[Performer],
    rng: random.Random | None = None,
    top_count: int = TOP_PERFORMER_COUNT,
) -> list[PerformerNode]:
    """Place every displayed performer; input order is rank order."""
    rng = rng or random.Random()
    total = len(displayed)
    nodes: list[PerformerNode] = []

    for index, performer in enumerate(displayed):
        x, y, z = spiral_position(index, total, rng)
        nodes.append(to_node(
            performer,
            x=x,
            y=y,
            z=z,
            size=node_size(performer.appearance_count),
            color=node_color(index, total, performer.appearance_count, top_count),
        ))
    return nodes


def to_node(performer: Performer, **layout: float | str | None) -> PerformerNode:
    """Snapshot a performer into an immutable node, optionally with layout."""
    return PerformerNode(
        id=performer.id,
        name=performer.name,
        profile_path=performer.profile_path,
        popularity=performer.popularity,
        known_for=performer.known_for,
        appearance_count=performer.appearance_count,
        appearances=list(performer.appearances),
        recommendations=list(performer.recommendations),
        **layout,
    )
