from typing import List
from environments.environment_abstract import Environment, State


def replay(state: State, soln: List[int], env: Environment) -> List[State]:
    path: List[State] = [state]
    move: int
    for move in soln:
        path.append(env.next_state([path[-1]], move)[0][0])

    return path


def is_valid_soln(state: State, soln: List[int], env: Environment) -> bool:
    soln_state: State = replay(state, soln, env)[-1]

    return bool(env.is_solved([soln_state])[0])
