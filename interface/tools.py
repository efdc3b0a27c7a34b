import argparse
from typing import List, Dict, Any, Optional

from environments.cube3 import Cube3State, parse_moves
from search_methods.solve_plan import SolvePlan, Oracle, build_plan, build_plan_from_moves
from utils import env_utils
from utils.data_utils import state_to_json
from utils.validation_utils import ValidationIssue, validate


def prepare_args(argv: Optional[List[str]] = None):
    parser: argparse.ArgumentParser = argparse.ArgumentParser()
    parser.add_argument('--env', type=str, default='cube3', help="Environment")
    parser.add_argument('--max_depth', type=int, default=24, help="Maximum length of solutions from the solver")
    parser.add_argument('--host', type=str, default='0.0.0.0', help="Host to serve on")
    parser.add_argument('--port', type=int, default=5000, help="Port to serve on")

    parser.add_argument('--verbose', action='store_true', default=False, help="Set for verbose")
    parser.add_argument('--debug', action='store_true', default=False, help="Set when debugging")

    args = parser.parse_args([] if argv is None else argv)
    return args


def issues_to_json(issues: List[ValidationIssue]) -> List[Dict[str, Any]]:
    return [{'kind': issue.kind, 'message': issue.message,
             'stickers': ["%s%i" % sticker for sticker in issue.stickers]} for issue in issues]


def plan_to_json(plan: SolvePlan) -> Dict[str, Any]:
    stages = [{'id': stage.stage_id, 'label': stage.label, 'description': stage.description,
               'start': stage.start, 'end': stage.end, 'move_count': stage.move_count,
               'preview': list(stage.preview)} for stage in plan.stages]
    frames = [{'index': frame.index, 'move': frame.move, 'state': state_to_json(frame.state)}
              for frame in plan.frames]

    return {'moves': list(plan.moves), 'stages': stages, 'frames': frames}


def getValidation(state: Cube3State, env_name: str = 'cube3') -> Dict[str, Any]:
    issues: List[ValidationIssue] = validate(state, env_utils.get_environment(env_name))
    return {'valid': len(issues) == 0, 'issues': issues_to_json(issues)}


def getMove(state: Cube3State, move: str, env_name: str = 'cube3') -> Dict[str, Any]:
    state_next: Cube3State = env_utils.get_environment(env_name).apply_moves(state, parse_moves(move))
    return {'state': state_to_json(state_next)}


def getResults(state: Cube3State, oracle: Oracle, env_name: str = 'cube3', verbose: bool = False) -> Dict[str, Any]:
    plan: SolvePlan = build_plan(state, oracle, env_utils.get_environment(env_name), verbose=verbose)
    return plan_to_json(plan)


def getResultsFromMoves(state: Cube3State, moves: List[str], env_name: str = 'cube3') -> Dict[str, Any]:
    plan: SolvePlan = build_plan_from_moves(state, moves, env_utils.get_environment(env_name))
    return plan_to_json(plan)
