from typing import List, Dict, Tuple, Any, Sequence
import json

import numpy as np

import sys

from environments.cube3 import Cube3State, FACES, COLOR_IDXS, NUM_STICKERS, parse_moves


class Logger(object):
    """ Writes everything printed to stdout to a file as well """

    def __init__(self, filename: str, mode: str = "a"):
        self.terminal = sys.stdout
        self.log = open(filename, mode)

    def write(self, message):
        self.terminal.write(message)
        self.log.write(message)
        self.log.flush()

    def flush(self):
        self.terminal.flush()

    def close(self):
        self.log.close()


def state_to_json(state: Cube3State) -> Dict[str, List[str]]:
    return state.to_dict()


def state_from_json(data: Any) -> Cube3State:
    """ Parse a state saved by state_to_json. Placeholder stickers (neutral) are kept as they are.

    @param data: Dictionary from face to the color names of its 9 stickers
    @return: Cube state
    """
    if not isinstance(data, dict):
        raise ValueError("A cube state must be an object with one entry per face")

    colors: List[int] = []
    for face in FACES:
        stickers = data.get(face)
        if not isinstance(stickers, list) or len(stickers) != 9:
            raise ValueError("Face %s must have 9 stickers" % face)

        for sticker in stickers:
            if not isinstance(sticker, str) or sticker not in COLOR_IDXS:
                raise ValueError("Unknown sticker %r on face %s" % (sticker, face))
            colors.append(COLOR_IDXS[sticker])

    assert len(colors) == NUM_STICKERS
    return Cube3State(np.array(colors))


def state_to_json_str(state: Cube3State) -> str:
    return json.dumps(state_to_json(state), indent=2)


def state_from_json_str(data_str: str) -> Cube3State:
    try:
        data = json.loads(data_str)
    except json.JSONDecodeError as e:
        raise ValueError("Invalid JSON: %s" % e)

    return state_from_json(data)


def save_session(filepath: str, state: Cube3State, moves: Sequence[str]):
    data: Dict[str, Any] = {'cube': state_to_json(state), 'moves': list(parse_moves(moves))}
    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)


def load_session(filepath: str) -> Tuple[Cube3State, List[str]]:
    with open(filepath, "r") as f:
        data = json.load(f)

    if not isinstance(data, dict) or 'cube' not in data:
        raise ValueError("%s does not contain a saved cube" % filepath)

    return state_from_json(data['cube']), parse_moves(data.get('moves', []))
