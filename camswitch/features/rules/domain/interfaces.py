from abc import ABC, abstractmethod
from typing import List

from .models import SwitchingRule

class IRuleRepository(ABC):
    """
    Contract for rule persistence.
    Every update is stored as a new row; nothing is overwritten.
    """

    @abstractmethod
    def load_latest(self) -> List[SwitchingRule]:
        """Returns the newest version of every stored rule (empty if none)."""
        pass

    @abstractmethod
    def save_version(self, rule: SwitchingRule) -> None:
        """Appends one rule version."""
        pass
