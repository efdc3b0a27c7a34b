from environments.cube3 import Cube3
from search_methods.kociemba_oracle import KociembaOracle
from search_methods.solve_plan import build_plan


def test_solves_scramble():
    env = Cube3()
    scrambled = env.apply_moves(env.solved_state(), "R U R' U' F2 D L' B U2 R2 D' F")

    oracle = KociembaOracle()
    moves = oracle(scrambled)
    assert moves is not None
    assert env.is_solved([env.apply_moves(scrambled, moves)])[0]


def test_plan_with_kociemba():
    env = Cube3()
    scrambled = env.apply_moves(env.solved_state(), "R U R' U'")

    plan = build_plan(scrambled, KociembaOracle(), env)
    assert plan.frames[0].state == scrambled
    assert env.is_solved([plan.frames[-1].state])[0]
    assert plan.stages[-1].stage_id == 'full-solve'
    assert plan.stages[-1].move_count == len(plan.moves)
