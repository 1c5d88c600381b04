import re
import random
from types import SimpleNamespace
from typing import List, Optional

import numpy as np

COORD_KEYS = ("x", "y", "z")
NUMERIC_KEYS = COORD_KEYS + ("dx", "dy", "dz", "r", "rm")


def parse_coord(value, origin_coord):
    if isinstance(value, str) and value.startswith("~"):
        offset = float(value[1:] or 0.0)
        return origin_coord + offset
    return float(value)


def split_args(arg_str: str):
    parts, depth, current = [], 0, []
    for ch in arg_str:
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    if current:
        parts.append("".join(current).strip())
    return parts


def parse_selector(selector: str) -> Optional[dict]:
    """Parses @a/@p/@r/@s[key=value,key=!value,...] into its type and (value, negate) arguments.
    None when malformed or when a numeric filter is not a number."""
    selector = selector.strip()
    if "[" in selector and "]" not in selector:
        selector += "]"
    match = re.match(r"@([aprs])(?:\[(.*?)\])?$", selector)
    if not match:
        return None

    args = {}
    args_str = match.group(2)
    if args_str:
        for pair in split_args(args_str):
            if "=" not in pair:
                return None
            if "=!" in pair:
                key, value = pair.split("=!", 1)
                negate = True
            else:
                key, value = pair.split("=", 1)
                negate = False
            key, value = key.strip(), value.strip()
            if value.replace(".", "", 1).isdigit():
                value = float(value) if "." in value else int(value)
            args[key] = (value, negate)

    for key, (value, _) in args.items():
        if key in NUMERIC_KEYS and not _is_number(value, relative=key in COORD_KEYS):
            return None
    return {"type": match.group(1), "args": args}


def _is_number(value, relative: bool = False) -> bool:
    if isinstance(value, (int, float)):
        return True
    text = str(value)
    if relative and text.startswith("~"):
        text = text[1:] or "0"
    try:
        float(text)
    except ValueError:
        return False
    return True


def _location(actor, axis: str) -> float:
    return getattr(getattr(actor, "location", None), axis, 0.0)


def passes_filters(players: List[object], args: dict, origin: Optional[object] = None) -> np.ndarray:
    """
    Returns a boolean mask of the players passing the selector filters.
    Missing origin or player locations count as (0, 0, 0).
    """
    n = len(players)
    if n == 0:
        return np.array([], dtype=bool)

    origin_arr = np.array([getattr(origin, axis, 0.0) if origin is not None else 0.0 for axis in "xyz"], dtype=np.float32)
    positions = np.array([[_location(p, axis) for axis in "xyz"] for p in players], dtype=np.float32)

    dist_sq = np.sum((positions - origin_arr) ** 2, axis=1)

    mask = np.ones(n, dtype=bool)
    r_min = args.get("rm", (None, False))[0]
    r_max = args.get("r", (None, False))[0]

    if r_min is not None:
        mask &= dist_sq >= float(r_min) ** 2
    if r_max is not None:
        mask &= dist_sq <= float(r_max) ** 2

    if "name" in args:
        val, negate = args["name"]
        val = str(val).lower()
        player_names = np.array([str(getattr(p, "name", "")).lower() for p in players])
        if negate:
            mask &= player_names != val
        else:
            mask &= player_names == val

    if "tag" in args:
        val, negate = args["tag"]
        tag_check = np.array([val in getattr(p, "scoreboard_tags", []) for p in players], dtype=bool)
        mask &= tag_check != negate

    # The volume starts at the origin, which already carries any x/y/z argument
    for axis in ("x", "y", "z"):
        d_key = "d" + axis
        if d_key in args:
            min_val = getattr(origin, axis, 0.0) if origin is not None else 0.0
            max_val = min_val + parse_coord(args[d_key][0], 0.0)
            if min_val > max_val:
                min_val, max_val = max_val, min_val
            axis_vals = np.array([_location(p, axis) for p in players], dtype=np.float32)
            mask &= (axis_vals >= min_val) & (axis_vals <= max_val)

    return mask


def get_matching_actors(players: list, selector: str, origin) -> list:
    """Players matched by a vanilla selector, evaluated around the origin (usually the sender)."""
    parsed = parse_selector(selector)
    if not parsed:
        return []

    args = parsed["args"]
    base_x, base_y, base_z = (_location(origin, axis) for axis in "xyz")

    origin_loc = SimpleNamespace(
        x=parse_coord(args["x"][0], base_x) if "x" in args else base_x,
        y=parse_coord(args["y"][0], base_y) if "y" in args else base_y,
        z=parse_coord(args["z"][0], base_z) if "z" in args else base_z,
    )

    selector_type = parsed["type"]
    if selector_type == "s":
        if origin is None or getattr(origin, "inventory", None) is None:
            return []
        return [origin] if passes_filters([origin], args, origin_loc)[0] else []

    mask = passes_filters(players, args, origin_loc)
    result = [player for player, keep in zip(players, mask) if keep]

    if selector_type == "p":
        if result:
            pos = np.array([[_location(a, axis) for axis in "xyz"] for a in result], dtype=np.float32)
            o = np.array([origin_loc.x, origin_loc.y, origin_loc.z], dtype=np.float32)
            closest = int(np.argmin(np.sum((pos - o) ** 2, axis=1)))
            result = [result[closest]]

    elif selector_type == "r":
        result = [random.choice(result)] if result else []

    return result
