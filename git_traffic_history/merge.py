#!/usr/bin/env python3
"""
Folding freshly fetched traffic windows into the accumulated history.

GitHub only returns the last ~14 days, so each window is small and a linear
search per incoming point is enough; no index structure is kept.
"""

from typing import Iterable, List, Tuple

from .models import RepoHistory, TrafficPoint, TrafficWindow


def upsert(target: List[TrafficPoint], incoming: Iterable[TrafficPoint]) -> List[TrafficPoint]:
    """
    Merge incoming points into target, keyed by day.

    A point for a day already present replaces the existing one (the later
    fetch wins, whatever the numbers). Otherwise it is inserted before the
    first point with a later day, or appended. target is modified in place
    and returned; it stays sorted ascending with one point per day.

    If target is empty it simply takes incoming as given, which is already
    sorted and unique when it comes from GitHub.
    """
    if not target:
        target.extend(incoming)
        return target

    for point in incoming:
        for i, existing in enumerate(target):
            if existing.timestamp == point.timestamp:
                target[i] = point
                break
            if existing.timestamp > point.timestamp:
                target.insert(i, point)
                break
        else:
            target.append(point)
    return target


def merge_window(repo_history: RepoHistory, window: TrafficWindow) -> Tuple[int, int]:
    """
    Upsert a fetched window into the matching metric of repo_history.

    Returns:
        (added, updated): days that were new, and known days whose figures changed.
    """
    points = repo_history.metric(window.kind)
    before = {point.timestamp: point for point in points}
    upsert(points, window.items)

    added = sum(1 for point in points if point.timestamp not in before)
    updated = sum(1 for point in points
                  if point.timestamp in before and before[point.timestamp] != point)
    return added, updated
