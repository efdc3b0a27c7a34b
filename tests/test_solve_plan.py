import pytest

from environments.cube3 import Cube3, PLACEHOLDER, parse_moves, invert_move
from search_methods.solve_plan import InvalidCubeError, NoSolutionError, build_plan, build_plan_from_moves, \
    build_frames, segment_stages, is_cross, is_first_layer, is_second_layer, is_last_layer_oriented, is_solved


@pytest.fixture(scope="module")
def env():
    return Cube3()


class InverseOracle:
    """ Solves a scrambled cube by undoing the scramble """

    def __init__(self, scramble):
        self.soln = [invert_move(move) for move in reversed(parse_moves(scramble))]
        self.calls = 0

    def __call__(self, state):
        self.calls += 1
        return list(self.soln)


def stage_ids(plan):
    return [stage.stage_id for stage in plan.stages]


def test_plan_for_scrambled_cube(env):
    scrambled = env.apply_moves(env.solved_state(), "R U R' U'")
    assert not env.is_solved([scrambled])[0]

    oracle = InverseOracle("R U R' U'")
    plan = build_plan(scrambled, oracle, env)

    assert oracle.calls == 1
    assert plan.moves == ("U", "R", "U'", "R'")
    assert len(plan.frames) == len(plan.moves) + 1
    assert plan.frames[0].state == scrambled
    assert plan.frames[0].move is None
    assert [frame.move for frame in plan.frames[1:]] == list(plan.moves)
    assert env.is_solved([plan.frames[-1].state])[0]

    full = plan.stages[-1]
    assert full.stage_id == 'full-solve'
    assert (full.start, full.end, full.move_count) == (0, len(plan.moves) - 1, len(plan.moves))
    assert full.preview == plan.moves


def test_sub_stages_cover_the_solution(env):
    scramble = "F2 D L' B U2 R2 D' F L2 B' D2 R U R' U'"
    scrambled = env.apply_moves(env.solved_state(), scramble)
    plan = build_plan(scrambled, InverseOracle(scramble), env)

    sub_stages = plan.stages[:-1]
    assert len(sub_stages) > 0
    assert sub_stages[0].start == 0
    assert sub_stages[-1].end == len(plan.moves) - 1
    assert sum(stage.move_count for stage in sub_stages) == len(plan.moves)
    for prev, stage in zip(sub_stages, sub_stages[1:]):
        assert stage.start == prev.end + 1
    for stage in sub_stages:
        assert stage.move_count > 0
        assert stage.preview == plan.moves[stage.start:stage.end + 1]


def test_stages_with_known_breakdown(env):
    # after F' only a D turn is left, so the cross and the three middle stages are done together
    scrambled = env.apply_moves(env.solved_state(), "D F")
    plan = build_plan(scrambled, InverseOracle("D F"), env)

    assert plan.moves == ("F'", "D'")
    assert stage_ids(plan) == ['cross', 'last-layer-permutation', 'full-solve']
    cross, permutation, full = plan.stages
    assert (cross.start, cross.end, cross.move_count, cross.preview) == (0, 0, 1, ("F'",))
    assert (permutation.start, permutation.end, permutation.move_count) == (1, 1, 1)
    assert (full.start, full.end, full.move_count) == (0, 1, 2)


def test_stages_already_satisfied_are_omitted(env):
    scrambled = env.apply_move(env.solved_state(), "D")
    plan = build_plan(scrambled, InverseOracle("D"), env)

    assert stage_ids(plan) == ['last-layer-permutation', 'full-solve']


def test_solved_cube_does_not_query_oracle(env):
    oracle = InverseOracle("")
    plan = build_plan(env.solved_state(), oracle, env)

    assert oracle.calls == 0
    assert plan.moves == ()
    assert len(plan.frames) == 1
    assert stage_ids(plan) == ['full-solve']
    assert plan.stages[0].move_count == 0


def test_incomplete_cube_is_never_sent_to_oracle(env):
    state = env.solved_state()
    state.set_sticker('L', 7, PLACEHOLDER)
    oracle = InverseOracle("R")

    with pytest.raises(InvalidCubeError) as excinfo:
        build_plan(state, oracle, env)

    assert oracle.calls == 0
    assert 'incomplete' in [issue.kind for issue in excinfo.value.issues]


def test_unreachable_cube_is_never_sent_to_oracle(env):
    state = env.solved_state()
    for (face_a, slot_a), (face_b, slot_b) in [(('U', 8), ('U', 6)), (('R', 0), ('F', 0)), (('F', 2), ('L', 2))]:
        color_a = state.sticker(face_a, slot_a)
        state.set_sticker(face_a, slot_a, state.sticker(face_b, slot_b))
        state.set_sticker(face_b, slot_b, color_a)
    oracle = InverseOracle("R")

    with pytest.raises(InvalidCubeError) as excinfo:
        build_plan(state, oracle, env)

    assert oracle.calls == 0
    assert [issue.kind for issue in excinfo.value.issues] == ['parity']


def test_oracle_without_result(env):
    scrambled = env.apply_move(env.solved_state(), "R")

    with pytest.raises(NoSolutionError):
        build_plan(scrambled, lambda state: None, env)
    with pytest.raises(NoSolutionError):
        build_plan(scrambled, lambda state: [], env)


def test_oracle_with_wrong_result(env):
    scrambled = env.apply_move(env.solved_state(), "R")

    with pytest.raises(NoSolutionError):
        build_plan(scrambled, lambda state: ["R"], env)


def test_oracle_gets_a_copy(env):
    scrambled = env.apply_move(env.solved_state(), "R")

    def oracle(state):
        state.set_sticker('U', 0, 3)
        return ["R'"]

    plan = build_plan(scrambled, oracle, env)
    assert plan.frames[0].state == env.apply_move(env.solved_state(), "R")


def test_plan_from_known_moves(env):
    scrambled = env.apply_moves(env.solved_state(), "R U R' U'")

    plan = build_plan_from_moves(scrambled, "U R U' R'", env)
    assert plan.moves == ("U", "R", "U'", "R'")
    assert env.is_solved([plan.frames[-1].state])[0]
    assert plan == build_plan(scrambled, InverseOracle("R U R' U'"), env)


def test_plan_from_partial_moves(env):
    scrambled = env.apply_moves(env.solved_state(), "R U R' U'")

    plan = build_plan_from_moves(scrambled, ["U", "R"], env)
    assert len(plan.frames) == 3
    assert 'last-layer-permutation' not in stage_ids(plan)
    assert plan.stages[-1].stage_id == 'full-solve'
    assert plan.stages[-1].move_count == 2


def test_plan_from_moves_rejects_bad_input(env):
    with pytest.raises(ValueError):
        build_plan_from_moves(env.solved_state(), ["U", "Q"], env)
    with pytest.raises(InvalidCubeError):
        build_plan_from_moves(env.empty_state(), [], env)


def test_frames_are_independent(env):
    state = env.apply_move(env.solved_state(), "F")
    frames = build_frames(state, ["F'", "U"], env)

    state.set_sticker('U', 0, 3)
    assert frames[0].state == env.apply_move(env.solved_state(), "F")
    assert frames[0].state is not frames[1].state
    assert frames[1].state == env.solved_state()


def test_segment_stages_requires_matching_frames(env):
    frames = build_frames(env.solved_state(), ["U"], env)
    with pytest.raises(ValueError):
        segment_stages(frames, ["U", "R"])


def swap_stickers(state, sticker_a, sticker_b):
    color_a = state.sticker(*sticker_a)
    state.set_sticker(*sticker_a, state.sticker(*sticker_b))
    state.set_sticker(*sticker_b, color_a)
    return state


def test_predicates(env):
    solved = env.solved_state()
    predicates = [is_cross, is_first_layer, is_second_layer, is_last_layer_oriented, is_solved]

    assert [predicate(solved) for predicate in predicates] == [True] * 5
    assert [predicate(env.empty_state()) for predicate in predicates] == [False] * 5
    assert [predicate(env.apply_move(solved, "D")) for predicate in predicates] == [True, True, True, True, False]
    assert [predicate(env.apply_move(solved, "F")) for predicate in predicates] == [False] * 5


def test_cross_needs_side_stickers(env):
    # the Up face stays white but the edges are not above their centers
    state = env.apply_move(env.solved_state(), "U")
    assert all(x == 0 for x in state.face('U'))
    assert not is_cross(state)

    assert not is_cross(swap_stickers(env.solved_state(), ('U', 7), ('F', 1)))


def test_first_layer_needs_corners(env):
    state = swap_stickers(env.solved_state(), ('U', 8), ('R', 0))
    assert is_cross(state)
    assert not is_first_layer(state)


def test_second_layer_needs_middle_edges(env):
    state = swap_stickers(env.solved_state(), ('F', 5), ('R', 3))
    assert is_first_layer(state)
    assert not is_second_layer(state)


def test_last_layer_orientation_needs_down_face(env):
    state = swap_stickers(env.solved_state(), ('D', 1), ('F', 7))
    assert is_second_layer(state)
    assert not is_last_layer_oriented(state)
    assert not is_solved(state)
