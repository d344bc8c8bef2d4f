"""Base generator class for ledger generators."""

from __future__ import annotations

import random
from abc import ABC

from faker import Faker


class BaseGenerator(ABC):
    """Base class for generators that mint records.

    Provides common initialization: Faker instance creation and seed-based
    reproducibility of generated identifiers and sample values.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale (default ``es_AR``).
    """

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "es_AR",
    ) -> None:
        self.fake = Faker(locale)
        self.random = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)

    def new_id(self) -> str:
        """Return a fresh record identifier."""
        return self.fake.uuid4()
