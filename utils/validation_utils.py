from typing import List, Dict, Tuple, Optional, NamedTuple
from collections import Counter

from environments.cube3 import Cube3, Cube3State, COLORS, PLACEHOLDER, FACES, color_name, sticker_ref
from utils import env_utils

ISSUE_KINDS: List[str] = ['color-count', 'duplicate-piece', 'orientation', 'parity', 'incomplete']


class ValidationIssue(NamedTuple):
    kind: str
    message: str
    stickers: Tuple[Tuple[str, int], ...] = ()


def collect_color_counts(state: Cube3State) -> Dict[int, int]:
    return dict(Counter(int(x) for x in state.colors))


def permutation_parity(perm: List[int]) -> int:
    """ Parity of a permutation from its cycle decomposition, sum of (cycle length - 1) mod 2

    @param perm: perm[i] is the element sitting at position i
    @return: 0 for even, 1 for odd
    """
    seen: List[bool] = [False] * len(perm)
    parity: int = 0
    for start in range(len(perm)):
        if seen[start]:
            continue

        cycle_len: int = 0
        idx: int = start
        while not seen[idx]:
            seen[idx] = True
            idx = perm[idx]
            cycle_len += 1

        parity += cycle_len - 1

    return parity % 2


def _refs(tiles: List[int]) -> Tuple[Tuple[str, int], ...]:
    return tuple(sticker_ref(idx) for idx in tiles)


def check_incomplete(state: Cube3State) -> List[ValidationIssue]:
    tiles: List[int] = [idx for idx, color in enumerate(state.colors) if color == PLACEHOLDER]
    if len(tiles) == 0:
        return []

    return [ValidationIssue('incomplete', "%i stickers have not been assigned a color yet." % len(tiles),
                            _refs(tiles))]


def check_color_counts(state: Cube3State) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    counts: Dict[int, int] = collect_color_counts(state)

    for color, name in enumerate(COLORS):
        count: int = counts.get(color, 0)
        if count != 9:
            tiles = [idx for idx, x in enumerate(state.colors) if x == color] if count > 9 else []
            issues.append(ValidationIssue('color-count', "Color %s appears %i times (%s, expected 9)."
                                          % (name, count, "too many" if count > 9 else "too few"), _refs(tiles)))

    for color in sorted(counts.keys()):
        if color < len(COLORS) or color == PLACEHOLDER:
            continue
        tiles = [idx for idx, x in enumerate(state.colors) if x == color]
        issues.append(ValidationIssue('color-count', "Unknown color %s found." % color_name(color), _refs(tiles)))

    return issues


def identify_pieces(state: Cube3State, piece_tiles: Dict[str, List[int]],
                    piece_keys: Dict[Tuple[int, ...], str]) -> Dict[str, Optional[str]]:
    """ Canonical piece currently sitting at each position, None where the colors match no piece """
    found: Dict[str, Optional[str]] = dict()
    for position, tiles in piece_tiles.items():
        key: Tuple[int, ...] = tuple(sorted(int(state.colors[idx]) for idx in tiles))
        found[position] = piece_keys.get(key)

    return found


def _check_piece_identity(state: Cube3State, piece_tiles: Dict[str, List[int]],
                          piece_keys: Dict[Tuple[int, ...], str], piece_type: str) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    found: Dict[str, Optional[str]] = identify_pieces(state, piece_tiles, piece_keys)

    for position, piece in found.items():
        tiles: List[int] = piece_tiles[position]
        colors: List[int] = [int(state.colors[idx]) for idx in tiles]
        # placeholders are reported once by check_incomplete
        if piece is None and PLACEHOLDER not in colors:
            issues.append(ValidationIssue('duplicate-piece', "%s at %s has an impossible color combination (%s)."
                                          % (piece_type, position, ", ".join(color_name(x) for x in colors)),
                                          _refs(tiles)))

    seen: Counter = Counter(piece for piece in found.values() if piece is not None)
    for piece in piece_tiles.keys():
        if seen[piece] == 0:
            issues.append(ValidationIssue('duplicate-piece', "%s %s is missing." % (piece_type, piece)))
        elif seen[piece] > 1:
            tiles = [idx for position, found_piece in found.items() if found_piece == piece
                     for idx in piece_tiles[position]]
            issues.append(ValidationIssue('duplicate-piece', "%s %s appears %i times."
                                          % (piece_type, piece, seen[piece]), _refs(tiles)))

    return issues


def check_pieces(state: Cube3State, env: Cube3) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = _check_piece_identity(state, env.corner_tiles, env.corner_keys, "Corner")
    issues.extend(_check_piece_identity(state, env.edge_tiles, env.edge_keys, "Edge"))

    return issues


def edge_flips(state: Cube3State, env: Cube3) -> Dict[str, int]:
    flips: Dict[str, int] = dict()
    for position, piece in identify_pieces(state, env.edge_tiles, env.edge_keys).items():
        if piece is None:
            continue
        first_color: int = int(state.colors[env.edge_tiles[position][0]])
        flips[position] = 0 if first_color == env.edge_colors[piece][0] else 1

    return flips


def corner_twists(state: Cube3State, env: Cube3) -> Dict[str, int]:
    up_down: Tuple[int, int] = (int(env.goal_colors[FACES.index('U') * 9]), int(env.goal_colors[FACES.index('D') * 9]))

    twists: Dict[str, int] = dict()
    for position, piece in identify_pieces(state, env.corner_tiles, env.corner_keys).items():
        if piece is None:
            continue
        colors: List[int] = [int(state.colors[idx]) for idx in env.corner_tiles[position]]
        twists[position] = [color in up_down for color in colors].index(True)

    return twists


def check_orientation(state: Cube3State, env: Cube3) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []

    flips: Dict[str, int] = edge_flips(state, env)
    if sum(flips.values()) % 2 != 0:
        tiles = [env.edge_tiles[position][0] for position, flip in flips.items() if flip == 1]
        issues.append(ValidationIssue('orientation', "Impossible edge orientation (sum of flips is odd).",
                                      _refs(tiles)))

    twists: Dict[str, int] = corner_twists(state, env)
    if sum(twists.values()) % 3 != 0:
        tiles = [env.corner_tiles[position][0] for position, twist in twists.items() if twist != 0]
        issues.append(ValidationIssue('orientation', "Impossible corner orientation "
                                                     "(sum of twists is not a multiple of 3).", _refs(tiles)))

    return issues


def check_parity(state: Cube3State, env: Cube3) -> List[ValidationIssue]:
    parities: List[int] = []
    for piece_tiles, piece_keys in [(env.corner_tiles, env.corner_keys), (env.edge_tiles, env.edge_keys)]:
        found: Dict[str, Optional[str]] = identify_pieces(state, piece_tiles, piece_keys)
        # a permutation only exists when every piece shows up exactly once
        if sorted(str(x) for x in found.values()) != sorted(piece_tiles.keys()):
            return []

        positions: List[str] = list(piece_tiles.keys())
        perm: List[int] = [positions.index(found[position]) for position in positions]
        parities.append(permutation_parity(perm))

    if parities[0] != parities[1]:
        return [ValidationIssue('parity', "Corner and edge permutation parities differ, this configuration cannot "
                                          "be reached with face turns (two pieces are swapped).")]

    return []


def validate(state: Cube3State, env: Optional[Cube3] = None) -> List[ValidationIssue]:
    """ Every reason why state is not a reachable cube configuration. All checks run, an empty list means the
    state is reachable.

    @param state: Cube state
    @param env: Cube environment holding the canonical piece tables, the cached one by default
    @return: List of validation issues
    """
    if env is None:
        env = env_utils.get_environment('cube3')

    issues: List[ValidationIssue] = []
    issues.extend(check_incomplete(state))
    issues.extend(check_color_counts(state))
    issues.extend(check_pieces(state, env))
    issues.extend(check_orientation(state, env))
    issues.extend(check_parity(state, env))

    return issues


def is_reachable(state: Cube3State, env: Optional[Cube3] = None) -> bool:
    return len(validate(state, env)) == 0
