import json
import sys

import pytest

from environments.cube3 import Cube3, PLACEHOLDER
from utils import data_utils


@pytest.fixture(scope="module")
def env():
    return Cube3()


def test_state_json_keeps_placeholders(env):
    state = env.empty_state()
    state.set_sticker('F', 0, 1)

    data = json.loads(data_utils.state_to_json_str(state))
    assert data['F'][:5] == ['red', 'neutral', 'neutral', 'neutral', 'green']
    assert data['U'][4] == 'white'

    restored = data_utils.state_from_json(data)
    assert restored == state
    assert restored.sticker('F', 1) == PLACEHOLDER


def test_state_json_of_scramble(env):
    state = env.apply_moves(env.solved_state(), "R U2 F' L D B2")
    assert data_utils.state_from_json_str(data_utils.state_to_json_str(state)) == state


@pytest.mark.parametrize("data", [
    None,
    [],
    {'U': ['white'] * 9},
    {face: ['white'] * 8 for face in "URFDLB"},
    {face: ['white'] * 8 + ['purple'] for face in "URFDLB"},
    {face: ['white'] * 8 + [3] for face in "URFDLB"},
])
def test_state_from_json_rejects_malformed(data):
    with pytest.raises(ValueError):
        data_utils.state_from_json(data)


def test_state_from_json_str_rejects_bad_json():
    with pytest.raises(ValueError):
        data_utils.state_from_json_str("{not json")


def test_session(env, tmp_path):
    state = env.apply_moves(env.solved_state(), "R U R' U'")
    filepath = str(tmp_path / "cube.session.json")

    data_utils.save_session(filepath, state, ["U", "R", "U'", "R'"])
    state_loaded, moves_loaded = data_utils.load_session(filepath)

    assert state_loaded == state
    assert moves_loaded == ["U", "R", "U'", "R'"]


def test_load_session_without_cube(tmp_path):
    filepath = tmp_path / "empty.json"
    filepath.write_text(json.dumps({'moves': []}))

    with pytest.raises(ValueError):
        data_utils.load_session(str(filepath))


def test_load_session_with_bad_moves(env, tmp_path):
    filepath = tmp_path / "bad_moves.json"
    filepath.write_text(json.dumps({'cube': data_utils.state_to_json(env.solved_state()), 'moves': ["U", 3]}))

    with pytest.raises(ValueError):
        data_utils.load_session(str(filepath))


def test_logger(tmp_path, capsys):
    filepath = str(tmp_path / "out.log")
    logger = data_utils.Logger(filepath, "w")
    logger.write("State: solved\n")
    logger.flush()
    logger.close()

    assert open(filepath).read() == "State: solved\n"
    assert capsys.readouterr().out == "State: solved\n"
    assert logger.terminal is sys.stdout
