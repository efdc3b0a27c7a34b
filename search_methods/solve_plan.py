from typing import List, Tuple, Dict, Callable, Optional, NamedTuple, Sequence, Union
import time

from environments.cube3 import Cube3, Cube3State, FACES, CENTER, parse_moves, sticker_idx
from utils import env_utils, search_utils
from utils.validation_utils import ValidationIssue, validate

Oracle = Callable[[Cube3State], Optional[List[str]]]


class InvalidCubeError(ValueError):
    def __init__(self, issues: List[ValidationIssue]):
        self.issues: List[ValidationIssue] = issues
        super().__init__("Cube state is not reachable: %s" % " ".join(issue.message for issue in issues))


class NoSolutionError(RuntimeError):
    pass


class SolveFrame(NamedTuple):
    index: int
    move: Optional[str]
    state: Cube3State


class SolveStage(NamedTuple):
    stage_id: str
    label: str
    description: str
    start: int
    end: int
    move_count: int
    preview: Tuple[str, ...]


class SolvePlan(NamedTuple):
    stages: Tuple[SolveStage, ...]
    frames: Tuple[SolveFrame, ...]
    moves: Tuple[str, ...]


# id, label, description. Sub-stages are in the order their predicates get stronger.
STAGE_DEFINITIONS: Dict[str, Tuple[str, str]] = {
    'cross': ("Cross", "Up edges placed around the Up center."),
    'first-layer': ("First layer", "Up corners inserted, the whole Up layer is done."),
    'second-layer': ("Second layer", "Middle layer edges inserted."),
    'last-layer-orientation': ("Last layer orientation", "Every Down sticker shows the Down color."),
    'last-layer-permutation': ("Last layer permutation", "Last layer pieces moved to their places."),
    'full-solve': ("Full solve", "The whole solving sequence."),
}

UP_EDGES: List[Tuple[int, str]] = [(7, 'F'), (5, 'R'), (1, 'B'), (3, 'L')]
# Up slot, then the two side stickers
UP_CORNERS: List[Tuple[int, Tuple[str, int], Tuple[str, int]]] = [(8, ('R', 0), ('F', 2)), (6, ('F', 0), ('L', 2)),
                                                                  (0, ('L', 0), ('B', 2)), (2, ('B', 0), ('R', 2))]
MIDDLE_EDGES: List[Tuple[Tuple[str, int], Tuple[str, int]]] = [(('F', 5), ('R', 3)), (('F', 3), ('L', 5)),
                                                               (('B', 5), ('L', 3)), (('B', 3), ('R', 5))]


def _color(state: Cube3State, face: str, slot: int) -> int:
    return int(state.colors[sticker_idx(face, slot)])


def _center(state: Cube3State, face: str) -> int:
    return _color(state, face, CENTER)


def _matches_center(state: Cube3State, face: str, slot: int) -> bool:
    return _color(state, face, slot) == _center(state, face)


def _reference_color(face: str) -> int:
    return FACES.index(face)


def is_cross(state: Cube3State) -> bool:
    up: int = _reference_color('U')
    if _center(state, 'U') != up:
        return False

    for up_slot, side in UP_EDGES:
        if _color(state, 'U', up_slot) != up or not _matches_center(state, side, 1):
            return False

    return True


def is_first_layer(state: Cube3State) -> bool:
    if not is_cross(state):
        return False

    up: int = _reference_color('U')
    for up_slot, side1, side2 in UP_CORNERS:
        if _color(state, 'U', up_slot) != up or not _matches_center(state, *side1) or \
                not _matches_center(state, *side2):
            return False

    return True


def is_second_layer(state: Cube3State) -> bool:
    if not is_first_layer(state):
        return False

    up_down: Tuple[int, int] = (_reference_color('U'), _reference_color('D'))
    for edge in MIDDLE_EDGES:
        for face, slot in edge:
            if _color(state, face, slot) in up_down or not _matches_center(state, face, slot):
                return False

    return True


def is_last_layer_oriented(state: Cube3State) -> bool:
    if not is_second_layer(state):
        return False

    return all(_matches_center(state, 'D', slot) for slot in range(9))


def is_solved(state: Cube3State) -> bool:
    return all(_matches_center(state, face, slot) for face in FACES for slot in range(9))


# cheapest first
STAGE_PREDICATES: List[Tuple[str, Callable[[Cube3State], bool]]] = [
    ('cross', is_cross),
    ('first-layer', is_first_layer),
    ('second-layer', is_second_layer),
    ('last-layer-orientation', is_last_layer_oriented),
    ('last-layer-permutation', is_solved),
]


def _make_stage(stage_id: str, start: int, end: int, moves: Sequence[str]) -> SolveStage:
    label, description = STAGE_DEFINITIONS[stage_id]
    return SolveStage(stage_id, label, description, start, end, end - start + 1, tuple(moves[start:end + 1]))


def build_frames(state: Cube3State, moves: Sequence[str], env: Cube3) -> List[SolveFrame]:
    frames: List[SolveFrame] = [SolveFrame(0, None, state.copy())]

    current: Cube3State = frames[0].state
    for move_idx, move in enumerate(moves):
        current = env.apply_move(current, move)
        frames.append(SolveFrame(move_idx + 1, move, current))

    return frames


def segment_stages(frames: Sequence[SolveFrame], moves: Sequence[str]) -> List[SolveStage]:
    """ Split the moves into the stages that achieve each sub-goal.

    Frame i is the state after moves[:i]. Each predicate is searched from the frame where the previous one was
    first satisfied, the stage then covers moves [start, found - 1]. Stages whose predicate already holds where
    they would start are left out, and so are the stages after a predicate that is never satisfied.
    A full-solve stage spanning every move is always appended.

    @param frames: Frames of the replayed sequence, len(moves) + 1 of them
    @param moves: Moves of the sequence
    @return: List of stages
    """
    if len(frames) != len(moves) + 1:
        raise ValueError("Expected one frame per move plus the starting frame, got %i frames for %i moves"
                         % (len(frames), len(moves)))

    stages: List[SolveStage] = []
    start: int = 0
    for stage_id, predicate in STAGE_PREDICATES:
        found: Optional[int] = None
        for frame in frames[start:]:
            if predicate(frame.state):
                found = frame.index
                break

        if found is None:
            break

        if found - start > 0:
            stages.append(_make_stage(stage_id, start, found - 1, moves))
        start = found

    stages.append(_make_stage('full-solve', 0, len(moves) - 1, moves))

    return stages


def _check_reachable(state: Cube3State, env: Cube3):
    issues: List[ValidationIssue] = validate(state, env)
    if len(issues) > 0:
        raise InvalidCubeError(issues)


def _make_plan(state: Cube3State, moves: List[str], env: Cube3) -> SolvePlan:
    frames: List[SolveFrame] = build_frames(state, moves, env)
    stages: List[SolveStage] = segment_stages(frames, moves)

    return SolvePlan(tuple(stages), tuple(frames), tuple(moves))


def build_plan(state: Cube3State, oracle: Oracle, env: Optional[Cube3] = None, verbose: bool = False) -> SolvePlan:
    """ Ask the oracle for a solving sequence, replay it and split it into stages

    @param state: Cube state to solve, must be reachable
    @param oracle: Returns the moves that solve a reachable state, or None if it cannot
    @param env: Cube environment, the cached one by default
    @param verbose: Print timing information
    @return: Solve plan
    """
    if env is None:
        env = env_utils.get_environment('cube3')

    _check_reachable(state, env)

    if env.is_solved([state])[0]:
        moves: List[str] = []
    else:
        start_time = time.time()
        moves_oracle: Optional[List[str]] = oracle(state.copy())
        if verbose:
            print("Oracle time: %.3f seconds" % (time.time() - start_time))

        if not moves_oracle:
            raise NoSolutionError("Could not compute a solving sequence")

        moves = parse_moves(moves_oracle)
        if not search_utils.is_valid_soln(state, [env.moves.index(move) for move in moves], env):
            raise NoSolutionError("Solving sequence %s does not solve the cube" % " ".join(moves))

    plan: SolvePlan = _make_plan(state, moves, env)
    if verbose:
        print("# Moves: %i, Stages: %s" % (len(moves), ", ".join("%s (%i)" % (stage.stage_id, stage.move_count)
                                                                 for stage in plan.stages)))

    return plan


def build_plan_from_moves(state: Cube3State, moves: Union[str, Sequence[str]],
                          env: Optional[Cube3] = None) -> SolvePlan:
    """ Same as build_plan for a move list that is already known, e.g. restored from a saved session. The moves
    do not have to solve the cube. """
    if env is None:
        env = env_utils.get_environment('cube3')

    _check_reachable(state, env)

    return _make_plan(state, parse_moves(moves), env)
