from abc import ABC, abstractmethod
import numpy as np
from typing import List, Tuple
from random import randrange


class State(ABC):
    @abstractmethod
    def __hash__(self):
        pass

    @abstractmethod
    def __eq__(self, other):
        pass


class Environment(ABC):
    def __init__(self):
        self.dtype = np.uint8
        self.fixed_actions: bool = True

    @abstractmethod
    def next_state(self, states: List[State], action: int) -> Tuple[List[State], List[float]]:
        """ Get the next state and transition cost given the current state and action

        @param states: List of states
        @param action: Action to take
        @return: Next states, transition costs
        """
        pass

    @abstractmethod
    def prev_state(self, states: List[State], action: int) -> List[State]:
        """ Get the previous state based on the current state and action

        @param states: List of states
        @param action: Action to take to get the previous state
        @return: Previous states
        """
        pass

    @abstractmethod
    def generate_goal_states(self, num_states: int) -> List[State]:
        """ Generate goal states

        @param num_states: Number of states to generate
        @return: List of states
        """
        pass

    @abstractmethod
    def is_solved(self, states: List[State]) -> np.ndarray:
        """ Returns whether or not state is solved

        @param states: List of states
        @return: Boolean numpy array where the element at index i corresponds to whether or not the
        state at index i is solved
        """
        pass

    @abstractmethod
    def get_num_moves(self) -> int:
        """ Used for environments with fixed actions. Corresponds to the numbers of each action

        @return: Number of actions
        """
        pass

    def generate_states(self, num_states: int, scramble_range: Tuple[int, int]) -> Tuple[List[State], List[int]]:
        """ Generate scrambled states by starting from the goal and taking random actions in reverse.
        Every generated state is reachable from the goal by construction.

        @param num_states: Number of states to generate
        @param scramble_range: Min and max number of random actions per state
        @return: List of states, number of actions taken for each state
        """
        assert (num_states > 0)
        assert (scramble_range[0] >= 0)
        assert self.fixed_actions, "Environments without fixed actions must implement their own method"

        scrambs: List[int] = list(range(scramble_range[0], scramble_range[1] + 1))
        num_env_moves: int = self.get_num_moves()

        # Get goal states
        states: List[State] = self.generate_goal_states(num_states)

        scramble_nums: np.ndarray = np.random.choice(scrambs, num_states)
        num_back_moves: np.ndarray = np.zeros(num_states)

        # Go backward from goal state
        while np.any(num_back_moves < scramble_nums):
            idxs: np.ndarray = np.where((num_back_moves < scramble_nums))[0]
            subset_size: int = int(max(len(idxs) / num_env_moves, 1))
            idxs = np.random.choice(idxs, subset_size, replace=False)

            move: int = randrange(num_env_moves)
            states_to_move = [states[i] for i in idxs]
            states_moved = self.prev_state(states_to_move, move)

            for state_moved_idx, state_moved in enumerate(states_moved):
                states[idxs[state_moved_idx]] = state_moved

            num_back_moves[idxs] = num_back_moves[idxs] + 1

        return states, scramble_nums.tolist()
