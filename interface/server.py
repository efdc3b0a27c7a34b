from typing import Optional
from flask import Flask
from flask import request, jsonify

from interface.tools import prepare_args, issues_to_json, getValidation, getMove, getResults, getResultsFromMoves
from search_methods.kociemba_oracle import KociembaOracle
from search_methods.solve_plan import Oracle, InvalidCubeError, NoSolutionError
from utils import env_utils
from utils.data_utils import state_from_json, state_to_json


def create_app(oracle: Optional[Oracle] = None, args=None) -> Flask:
    if args is None:
        args = prepare_args()
    if oracle is None:
        oracle = KociembaOracle(max_depth=args.max_depth, verbose=args.verbose)

    app = Flask(__name__)
    app.config['ENV_NAME'] = args.env
    app.config['VERBOSE'] = args.verbose
    app.config['ORACLE'] = oracle

    def get_payload():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValueError("Expected a JSON object")
        return data

    @app.errorhandler(ValueError)
    def bad_request(e):
        return jsonify({'error': str(e)}), 400

    @app.errorhandler(InvalidCubeError)
    def invalid_cube(e):
        return jsonify({'error': str(e), 'issues': issues_to_json(e.issues)}), 422

    @app.errorhandler(NoSolutionError)
    def no_solution(e):
        return jsonify({'error': str(e)}), 503

    @app.route('/initState', methods=['GET'])
    def initState():
        env = env_utils.get_environment(app.config['ENV_NAME'])
        return jsonify({'state': state_to_json(env.solved_state()), 'empty': state_to_json(env.empty_state())})

    @app.route('/move', methods=['POST'])
    def move():
        data = get_payload()
        return jsonify(getMove(state_from_json(data.get('state')), str(data.get('move', '')), app.config['ENV_NAME']))

    @app.route('/validate', methods=['POST'])
    def validate():
        data = get_payload()
        return jsonify(getValidation(state_from_json(data.get('state')), app.config['ENV_NAME']))

    @app.route('/solve', methods=['POST'])
    def solve():
        data = get_payload()
        state = state_from_json(data.get('state'))
        if app.config['VERBOSE']:
            print("computing...")
        result = getResults(state, app.config['ORACLE'], app.config['ENV_NAME'], verbose=app.config['VERBOSE'])
        if app.config['VERBOSE']:
            print("complete!")
        return jsonify(result)

    @app.route('/plan', methods=['POST'])
    def plan():
        data = get_payload()
        moves = data.get('moves', [])
        if not isinstance(moves, (list, str)):
            raise ValueError("moves must be a list of move tokens")
        return jsonify(getResultsFromMoves(state_from_json(data.get('state')), moves, app.config['ENV_NAME']))

    return app


def main():
    import sys
    args = prepare_args(sys.argv[1:])
    app = create_app(args=args)
    app.run(debug=args.debug, host=args.host, port=args.port)


if __name__ == '__main__':
    main()
