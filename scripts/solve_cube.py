from argparse import ArgumentParser
from typing import List
import sys
import time

from environments.cube3 import Cube3, Cube3State, facelets_to_state, state_to_facelets
from search_methods.kociemba_oracle import KociembaOracle
from search_methods.solve_plan import SolvePlan, NoSolutionError, build_plan, build_plan_from_moves
from utils import env_utils, data_utils
from utils.validation_utils import ValidationIssue, validate


def print_issues(issues: List[ValidationIssue]):
    for issue in issues:
        print("[%s] %s" % (issue.kind, issue.message))
        if len(issue.stickers) > 0:
            print("    stickers: %s" % ", ".join("%s%i" % sticker for sticker in issue.stickers))


def print_plan(plan: SolvePlan):
    print("Solution (%i moves): %s" % (len(plan.moves), " ".join(plan.moves)))
    for stage in plan.stages:
        print("%-24s moves %3i-%3i (%2i): %s" % (stage.label, stage.start, stage.end, stage.move_count,
                                                 " ".join(stage.preview)))


def main():
    # parse arguments
    parser: ArgumentParser = ArgumentParser()
    parser.add_argument('--state', type=str, default='', help="JSON file with the cube state")
    parser.add_argument('--facelets', type=str, default='', help="54 character facelet string (URFDLB order)")
    parser.add_argument('--scramble', type=str, default='', help="Moves applied to a solved cube, e.g. \"R U R' U'\"")
    parser.add_argument('--moves', type=str, default='', help="Known solving moves, the solver is not called "
                                                              "when given")
    parser.add_argument('--max_depth', type=int, default=24, help="Maximum length of solutions from the solver")
    parser.add_argument('--log_file', type=str, default='', help="Also write output to this file")
    parser.add_argument('--verbose', action='store_true', default=False, help="Set for verbose")

    args = parser.parse_args()

    if args.log_file:
        sys.stdout = data_utils.Logger(args.log_file, "a")

    env: Cube3 = env_utils.get_environment('cube3')

    # get state
    state: Cube3State
    if args.state:
        with open(args.state) as f:
            state = data_utils.state_from_json_str(f.read())
    elif args.facelets:
        state = facelets_to_state(args.facelets)
    else:
        state = env.apply_moves(env.solved_state(), args.scramble)

    # validate
    start_time = time.time()
    issues: List[ValidationIssue] = validate(state, env)
    if args.verbose:
        print("Validation time: %.4f seconds" % (time.time() - start_time))

    if len(issues) > 0:
        print("%i issues found" % len(issues))
        print_issues(issues)
        sys.exit(1)

    print("State: %s" % state_to_facelets(state))

    # plan
    try:
        if args.moves:
            plan: SolvePlan = build_plan_from_moves(state, args.moves, env)
        else:
            plan = build_plan(state, KociembaOracle(max_depth=args.max_depth, verbose=args.verbose), env,
                              verbose=args.verbose)
    except NoSolutionError as e:
        print("Error: %s" % e)
        sys.exit(2)

    print_plan(plan)


if __name__ == "__main__":
    main()
