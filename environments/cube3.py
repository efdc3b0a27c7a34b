from typing import List, Dict, Tuple, Union, Sequence
import numpy as np

from environments.environment_abstract import Environment, State

# Faces in storage order. This is also the facelet order expected by two-phase solvers.
FACES: List[str] = ['U', 'R', 'F', 'D', 'L', 'B']
FACE_IDXS: Dict[str, int] = {face: idx for idx, face in enumerate(FACES)}

# Color i is the reference color of FACES[i]
# WHITE:0, RED:1, GREEN:2, YELLOW:3, ORANGE:4, BLUE:5
COLORS: List[str] = ['white', 'red', 'green', 'yellow', 'orange', 'blue']
PLACEHOLDER: int = len(COLORS)
COLOR_NAMES: List[str] = COLORS + ['neutral']
COLOR_IDXS: Dict[str, int] = {name: idx for idx, name in enumerate(COLOR_NAMES)}

CENTER: int = 4
NUM_STICKERS: int = 9 * len(FACES)

MODIFIER_TURNS: Dict[str, int] = {'': 1, "'": 3, '2': 2}

StickerRef = Tuple[str, int]

# Clockwise rotation of the turned face, center fixed
FACE_ROTATION_CYCLES: List[List[int]] = [[0, 2, 8, 6], [1, 5, 7, 3]]

# Stickers of the neighbouring faces carried along by a clockwise quarter turn.
# Each cycle moves the sticker at position i to position i + 1.
ADJ_CYCLES: Dict[str, List[List[StickerRef]]] = {
    'U': [[('F', 0), ('L', 0), ('B', 0), ('R', 0)],
          [('F', 1), ('L', 1), ('B', 1), ('R', 1)],
          [('F', 2), ('L', 2), ('B', 2), ('R', 2)]],
    'D': [[('F', 6), ('R', 6), ('B', 6), ('L', 6)],
          [('F', 7), ('R', 7), ('B', 7), ('L', 7)],
          [('F', 8), ('R', 8), ('B', 8), ('L', 8)]],
    'R': [[('F', 2), ('U', 2), ('B', 6), ('D', 2)],
          [('F', 5), ('U', 5), ('B', 3), ('D', 5)],
          [('F', 8), ('U', 8), ('B', 0), ('D', 8)]],
    'L': [[('U', 0), ('F', 0), ('D', 0), ('B', 8)],
          [('U', 3), ('F', 3), ('D', 3), ('B', 5)],
          [('U', 6), ('F', 6), ('D', 6), ('B', 2)]],
    'F': [[('U', 6), ('R', 0), ('D', 2), ('L', 8)],
          [('U', 7), ('R', 3), ('D', 1), ('L', 5)],
          [('U', 8), ('R', 6), ('D', 0), ('L', 2)]],
    'B': [[('U', 2), ('L', 0), ('D', 6), ('R', 8)],
          [('U', 1), ('L', 3), ('D', 7), ('R', 5)],
          [('U', 0), ('L', 6), ('D', 8), ('R', 2)]],
}

# Corner stickers start on U/D and go clockwise around the corner.
CORNERS: Dict[str, List[StickerRef]] = {
    'URF': [('U', 8), ('R', 0), ('F', 2)],
    'UFL': [('U', 6), ('F', 0), ('L', 2)],
    'ULB': [('U', 0), ('L', 0), ('B', 2)],
    'UBR': [('U', 2), ('B', 0), ('R', 2)],
    'DFR': [('D', 2), ('F', 8), ('R', 6)],
    'DLF': [('D', 0), ('L', 8), ('F', 6)],
    'DBL': [('D', 6), ('B', 8), ('L', 6)],
    'DRB': [('D', 8), ('R', 8), ('B', 6)],
}

# Edge stickers start on U/D, or on F/B for the middle layer.
EDGES: Dict[str, List[StickerRef]] = {
    'UR': [('U', 5), ('R', 1)],
    'UF': [('U', 7), ('F', 1)],
    'UL': [('U', 3), ('L', 1)],
    'UB': [('U', 1), ('B', 1)],
    'DR': [('D', 5), ('R', 7)],
    'DF': [('D', 1), ('F', 7)],
    'DL': [('D', 3), ('L', 7)],
    'DB': [('D', 7), ('B', 7)],
    'FR': [('F', 5), ('R', 3)],
    'FL': [('F', 3), ('L', 5)],
    'BL': [('B', 5), ('L', 3)],
    'BR': [('B', 3), ('R', 5)],
}


def sticker_idx(face: str, slot: int) -> int:
    if face not in FACE_IDXS:
        raise ValueError("Unknown face %s" % face)
    if not 0 <= slot < 9:
        raise ValueError("Sticker slot must be in [0, 8], got %s" % slot)

    return FACE_IDXS[face] * 9 + slot


def sticker_ref(idx: int) -> StickerRef:
    return FACES[idx // 9], idx % 9


def color_name(color: int) -> str:
    if 0 <= color < len(COLOR_NAMES):
        return COLOR_NAMES[color]

    return "unknown(%i)" % color


def parse_move(move: str) -> Tuple[str, int]:
    """ Split a move token into its face and the number of clockwise quarter turns

    @param move: Move in standard notation, e.g. R, R' or R2
    @return: face, quarter turns (1, 2 or 3)
    """
    if not isinstance(move, str):
        raise ValueError("Move tokens are strings, got %r" % (move,))

    move = move.strip()
    if len(move) == 0 or move[0] not in FACE_IDXS or move[1:] not in MODIFIER_TURNS:
        raise ValueError("Unknown move %r" % move)

    return move[0], MODIFIER_TURNS[move[1:]]


def parse_moves(moves: Union[str, Sequence[str]]) -> List[str]:
    if isinstance(moves, str):
        moves = moves.split()
    elif not isinstance(moves, (list, tuple)):
        raise ValueError("Expected a move string or a list of moves, got %r" % (moves,))

    moves_parsed: List[str] = []
    for move in moves:
        face, turns = parse_move(move)
        moves_parsed.append(Cube3.moves[3 * FACE_IDXS[face] + [1, 3, 2].index(turns)])

    return moves_parsed


def invert_move(move: str) -> str:
    face, turns = parse_move(move)
    return Cube3.moves[3 * FACE_IDXS[face] + [3, 1, 2].index(turns)]


class Cube3State(State):
    __slots__ = ['colors', 'hash']

    def __init__(self, colors: np.ndarray):
        colors = np.asarray(colors)
        if colors.shape != (NUM_STICKERS,):
            raise ValueError("A cube state has %i stickers, got shape %s" % (NUM_STICKERS, colors.shape))

        if not np.issubdtype(colors.dtype, np.integer) or colors.min() < 0 or colors.max() > np.iinfo(np.uint8).max:
            raise ValueError("Sticker colors must be integers in 0-255, got %s" % colors)

        # always a private copy, states never share their sticker array
        self.colors: np.ndarray = colors.astype(np.uint8)
        self.hash = None

    def __hash__(self):
        if self.hash is None:
            self.hash = hash(self.colors.tobytes())

        return self.hash

    def __eq__(self, other):
        if not isinstance(other, Cube3State):
            return NotImplemented
        return np.array_equal(self.colors, other.colors)

    def __repr__(self):
        return "Cube3State(%s)" % " ".join("".join(str(x) for x in self.face(face)) for face in FACES)

    def copy(self) -> 'Cube3State':
        return Cube3State(self.colors)

    def face(self, face: str) -> np.ndarray:
        start: int = sticker_idx(face, 0)
        return self.colors[start:start + 9].copy()

    def sticker(self, face: str, slot: int) -> int:
        return int(self.colors[sticker_idx(face, slot)])

    def set_sticker(self, face: str, slot: int, color: int):
        # only meant for manual input, moves never go through here
        if slot == CENTER:
            raise ValueError("Centers are fixed, cannot recolor %s%i" % (face, slot))
        if not 0 <= color < len(COLOR_NAMES):
            raise ValueError("Unknown color %s" % color)

        self.colors[sticker_idx(face, slot)] = color
        self.hash = None

    def to_dict(self) -> Dict[str, List[str]]:
        return {face: [color_name(int(x)) for x in self.face(face)] for face in FACES}


def state_to_facelets(state: Cube3State) -> str:
    """ Encode a fully specified state as a 54 character facelet string (URFDLB face order), each sticker
    named by the face whose reference color it carries
    """
    facelets: List[str] = []
    for idx, color in enumerate(state.colors):
        if color == PLACEHOLDER:
            raise ValueError("Sticker %s%i has not been assigned yet" % sticker_ref(idx))
        if color >= len(COLORS):
            raise ValueError("Color %s at %s%i has no face code" % ((color_name(int(color)),) + sticker_ref(idx)))
        facelets.append(FACES[color])

    return "".join(facelets)


def facelets_to_state(facelets: str) -> Cube3State:
    facelets = facelets.strip()
    if len(facelets) != NUM_STICKERS:
        raise ValueError("Facelet string must have %i characters, got %i" % (NUM_STICKERS, len(facelets)))

    unknown = set(facelets) - set(FACES)
    if len(unknown) > 0:
        raise ValueError("Unknown face codes in facelet string: %s" % ", ".join(sorted(unknown)))

    return Cube3State(np.array([FACE_IDXS[x] for x in facelets]))


class Cube3(Environment):
    # Moves are in triples: (move, move', move2)
    moves: List[str] = ["%s%s" % (f, m) for f in FACES for m in ['', "'", '2']]

    def __init__(self):
        super().__init__()
        self.cube_len = 3

        # solved state
        self.goal_colors: np.ndarray = np.repeat(np.arange(0, len(FACES)), self.cube_len ** 2).astype(self.dtype)

        # get idxs changed for moves
        self.rotate_idxs_new: Dict[str, np.ndarray]
        self.rotate_idxs_old: Dict[str, np.ndarray]
        self.rotate_idxs_new, self.rotate_idxs_old = self._compute_rotation_idxs(self.moves)

        # tiles of each corner and edge position
        self.corner_tiles: Dict[str, List[int]] = {name: [sticker_idx(*ref) for ref in refs]
                                                   for name, refs in CORNERS.items()}
        self.edge_tiles: Dict[str, List[int]] = {name: [sticker_idx(*ref) for ref in refs]
                                                 for name, refs in EDGES.items()}

        # canonical pieces, keyed by the sorted colors of the centers they touch
        self.corner_colors: Dict[str, Tuple[int, ...]]
        self.corner_keys: Dict[Tuple[int, ...], str]
        self.edge_colors: Dict[str, Tuple[int, ...]]
        self.edge_keys: Dict[Tuple[int, ...], str]
        self.corner_colors, self.corner_keys = self._get_canonical_pieces(CORNERS)
        self.edge_colors, self.edge_keys = self._get_canonical_pieces(EDGES)

    def next_state(self, states: List[Cube3State], action: int) -> Tuple[List[Cube3State], List[float]]:
        states_np = np.stack([x.colors for x in states], axis=0)
        states_next_np, transition_costs = self._move_np(states_np, action)

        states_next: List[Cube3State] = [Cube3State(x) for x in list(states_next_np)]

        return states_next, transition_costs

    def prev_state(self, states: List[Cube3State], action: int) -> List[Cube3State]:
        move_rev_idx: int = self.moves.index(invert_move(self.moves[action]))
        return self.next_state(states, move_rev_idx)[0]

    def generate_goal_states(self, num_states: int) -> List[Cube3State]:
        return [Cube3State(self.goal_colors) for _ in range(num_states)]

    def solved_state(self) -> Cube3State:
        return Cube3State(self.goal_colors)

    def empty_state(self) -> Cube3State:
        colors: np.ndarray = np.full(NUM_STICKERS, PLACEHOLDER, dtype=self.dtype)
        centers: np.ndarray = np.arange(CENTER, NUM_STICKERS, 9)
        colors[centers] = self.goal_colors[centers]

        return Cube3State(colors)

    def is_solved(self, states: List[Cube3State]) -> np.ndarray:
        states_np = np.stack([state.colors for state in states], axis=0)
        is_equal = np.equal(states_np, np.expand_dims(self.goal_colors, 0))

        return np.all(is_equal, axis=1)

    def get_num_moves(self) -> int:
        return len(self.moves)

    def move_idx(self, move: str) -> int:
        return self.moves.index(parse_moves([move])[0])

    def apply_move(self, state: Cube3State, move: str) -> Cube3State:
        return self.next_state([state], self.move_idx(move))[0][0]

    def apply_moves(self, state: Cube3State, moves: Union[str, Sequence[str]]) -> Cube3State:
        state_next: Cube3State = state.copy()
        for move in parse_moves(moves):
            state_next = self.apply_move(state_next, move)

        return state_next

    def _move_np(self, states_np: np.ndarray, action: int):
        """
        Turn every cube in states_np with the same action
        Args:
            states_np: cube states to be turned, one per row
            action: index into self.moves
        Returns:
            Return the next state for the cubes and the transition costs
        """
        action_str: str = self.moves[action]

        states_next_np: np.ndarray = states_np.copy()
        states_next_np[:, self.rotate_idxs_new[action_str]] = states_np[:, self.rotate_idxs_old[action_str]]

        transition_costs: List[float] = [1.0] * states_np.shape[0]

        return states_next_np, transition_costs

    def _get_canonical_pieces(self, pieces: Dict[str, List[StickerRef]]):
        piece_colors: Dict[str, Tuple[int, ...]] = dict()
        piece_keys: Dict[Tuple[int, ...], str] = dict()
        for name, refs in pieces.items():
            colors = tuple(int(self.goal_colors[sticker_idx(face, CENTER)]) for face, _ in refs)
            piece_colors[name] = colors
            piece_keys[tuple(sorted(colors))] = name

        assert len(piece_keys) == len(pieces), "Canonical pieces must have distinct color sets"

        return piece_colors, piece_keys

    def _compute_rotation_idxs(self, moves: List[str]) -> Tuple[Dict[str, np.ndarray], Dict[str, np.ndarray]]:
        rotate_idxs_new: Dict[str, np.ndarray] = dict()
        rotate_idxs_old: Dict[str, np.ndarray] = dict()

        # one clockwise quarter turn per face, as a map new idx <- old idx
        quarter_turns: Dict[str, np.ndarray] = dict()
        for face in FACES:
            src: np.ndarray = np.arange(NUM_STICKERS)
            cycles: List[List[StickerRef]] = [[(face, slot) for slot in cycle] for cycle in FACE_ROTATION_CYCLES]
            cycles = cycles + ADJ_CYCLES[face]
            for cycle in cycles:
                idxs: List[int] = [sticker_idx(*ref) for ref in cycle]
                # last value goes to the first position, every other one moves up by one
                src[idxs[0]] = idxs[-1]
                for i in range(1, len(idxs)):
                    src[idxs[i]] = idxs[i - 1]
            quarter_turns[face] = src

        for move in moves:
            face, turns = parse_move(move)
            src: np.ndarray = np.arange(NUM_STICKERS)
            for _ in range(turns):
                src = src[quarter_turns[face]]

            rotate_idxs_new[move] = np.where(src != np.arange(NUM_STICKERS))[0]
            rotate_idxs_old[move] = src[rotate_idxs_new[move]]

        return rotate_idxs_new, rotate_idxs_old
