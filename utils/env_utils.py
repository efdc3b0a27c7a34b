from functools import lru_cache

from environments.environment_abstract import Environment


@lru_cache(maxsize=None)
def get_environment(env_name: str) -> Environment:
    """ Environments are built once per name and shared. They are never mutated after construction, so callers
    on different threads can use the same instance.
    """
    env_name = env_name.lower()
    env: Environment

    if env_name == 'cube3':
        from environments.cube3 import Cube3
        env = Cube3()
    else:
        raise ValueError('No known environment %s' % env_name)

    return env
