from typing import List, Optional
import time

import kociemba

from environments.cube3 import Cube3State, state_to_facelets, parse_moves


class KociembaOracle:
    """ Two-phase solver used as the move-sequence oracle. The state must already be known to be reachable,
    kociemba gives no reason when it rejects a cube.
    """

    def __init__(self, max_depth: int = 24, verbose: bool = False):
        self.max_depth: int = max_depth
        self.verbose: bool = verbose

    def __call__(self, state: Cube3State) -> Optional[List[str]]:
        return self.solve(state)

    def solve(self, state: Cube3State) -> Optional[List[str]]:
        facelets: str = state_to_facelets(state)

        start_time = time.time()
        try:
            soln: str = kociemba.solve(facelets, max_depth=self.max_depth)
        except ValueError as e:
            if self.verbose:
                print("kociemba rejected %s: %s" % (facelets, e))
            return None

        if self.verbose:
            print("kociemba: %s (%.3f seconds)" % (soln, time.time() - start_time))

        soln = soln.strip()
        if len(soln) == 0:
            return None

        return parse_moves(soln)
