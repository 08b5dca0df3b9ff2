"""Turn OSRM route steps into short English instructions."""

from __future__ import annotations

from typing import Any

DEFAULT_INSTRUCTION = "Continue"

_MODIFIERS = {
    "uturn": "Make a U-turn",
    "sharp right": "Make a sharp right",
    "right": "Turn right",
    "slight right": "Make a slight right",
    "straight": "Go straight",
    "slight left": "Make a slight left",
    "left": "Turn left",
    "sharp left": "Make a sharp left",
}

_ORDINALS = ["1st", "2nd", "3rd", "4th", "5th", "6th", "7th", "8th", "9th", "10th"]


def _way_name(step: dict[str, Any]) -> str:
    name = (step.get("name") or "").strip()
    ref = (step.get("ref") or "").strip()
    if name and ref and ref not in name:
        return f"{name} ({ref})"
    return name or ref


def _onto(text: str, way: str) -> str:
    return f"{text} onto {way}" if way else text


def compile_instruction(step: dict[str, Any]) -> str:
    """Return a human-readable instruction for a single OSRM step."""
    maneuver = step.get("maneuver") or {}
    kind = maneuver.get("type")
    modifier = maneuver.get("modifier")
    way = _way_name(step)

    if kind == "depart":
        bearing = maneuver.get("bearing_after")
        direction = f"Head {_cardinal(bearing)}" if bearing is not None else "Head out"
        return f"{direction} on {way}" if way else direction
    if kind == "arrive":
        if modifier in ("left", "right", "slight left", "slight right", "sharp left", "sharp right"):
            side = "left" if "left" in modifier else "right"
            return f"You have arrived at your destination, on the {side}"
        return "You have arrived at your destination"
    if kind in ("roundabout", "rotary", "exit roundabout", "exit rotary"):
        exit_number = maneuver.get("exit")
        if isinstance(exit_number, int) and 1 <= exit_number <= len(_ORDINALS):
            return _onto(f"Enter the roundabout and take the {_ORDINALS[exit_number - 1]} exit", way)
        return _onto("Enter the roundabout", way)
    if kind == "merge":
        return _onto("Merge", way)
    if kind in ("on ramp", "off ramp"):
        ramp = "Take the ramp"
        if modifier and "left" in modifier:
            ramp = "Take the ramp on the left"
        elif modifier and "right" in modifier:
            ramp = "Take the ramp on the right"
        return _onto(ramp, way)
    if kind == "fork":
        side = "left" if modifier and "left" in modifier else "right"
        return _onto(f"Keep {side} at the fork", way)
    if kind == "end of road":
        side = "left" if modifier and "left" in modifier else "right"
        return _onto(f"Turn {side} at the end of the road", way)
    if kind in ("continue", "new name", "notification", "use lane"):
        if modifier in (None, "straight"):
            return f"Continue on {way}" if way else DEFAULT_INSTRUCTION
        return _onto(_MODIFIERS.get(modifier, DEFAULT_INSTRUCTION), way)
    if kind == "turn" and modifier in _MODIFIERS:
        return _onto(_MODIFIERS[modifier], way)
    return f"Continue on {way}" if way else DEFAULT_INSTRUCTION


def _cardinal(bearing: float) -> str:
    directions = ["north", "northeast", "east", "southeast", "south", "southwest", "west", "northwest"]
    return directions[int(((bearing % 360) + 22.5) // 45) % 8]
