from typing import Dict

class VarManager:
    """
    Centralized manager for SAT variable allocation.
    Feature variables are declared first and occupy 1..n; auxiliary Tseitin
    variables and clause-group selectors are allocated above them.
    """
    def __init__(self):
        self._var_map: Dict[str, int] = {}
        self._id_to_name: Dict[int, str] = {}
        self._next_id: int = 1

    @property
    def max_id(self) -> int:
        return self._next_id - 1

    def declare(self, name: str) -> int:
        """
        Declare a user variable. Returns existing ID if already declared.
        """
        if name in self._var_map:
            return self._var_map[name]

        vid = self._next_id
        self._var_map[name] = vid
        self._id_to_name[vid] = name
        self._next_id += 1
        return vid

    def fresh(self, prefix: str = "aux", namespace: str = "default") -> int:
        """
        Allocate a fresh auxiliary variable.
        """
        name = f"::{namespace}::{prefix}_{self._next_id}"
        vid = self._next_id
        self._var_map[name] = vid
        self._id_to_name[vid] = name
        self._next_id += 1
        return vid

    def lookup(self, name: str) -> int:
        """Returns the ID of a declared variable; KeyError otherwise."""
        return self._var_map[name]

    def name_of(self, vid: int) -> str:
        return self._id_to_name[abs(vid)]
