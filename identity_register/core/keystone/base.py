"""Shared plumbing for the per-kind reconcilers."""
from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Mapping, Optional

from .client import KeystoneCommand, OptionValue
from .lookup import narrow_rows, search_uuid
from .prettytable import parse_table

logger = logging.getLogger(__name__)

TableParser = Callable[[Optional[str]], List[Dict[str, str]]]


class Reconciler(ABC):
    """Base class: owns the invoker and table parser used for every lookup.
    
    Subclasses implement ``ensure(descriptor) -> bool``.
    """
    
    kind = ""
    
    def __init__(self, command: KeystoneCommand, parse: TableParser = parse_table):
        """Initialize reconciler.
        
        Args:
            command: Keystone command invoker
            parse: Table parser applied to listing output
        """
        self.command = command
        self.parse = parse
    
    def list_rows(self, verb: str, options: Optional[Mapping[str, OptionValue]] = None) -> List[Dict[str, str]]:
        """Run a listing command and parse its table."""
        return self.parse(self.command.invoke(verb, options or {}))
    
    @staticmethod
    def find_uuid(rows: List[Dict[str, str]], id_column: str, filters: Mapping[str, str]) -> Optional[str]:
        """Resolve an identifier over the id column and the ``filters`` columns only."""
        return search_uuid(narrow_rows(rows, [id_column, *filters]), id_column, filters)
    
    def identity_uuid(
        self,
        kind: str,
        key: str,
        value: str,
        options: Optional[Mapping[str, OptionValue]] = None,
        id_column: str = "id",
    ) -> Optional[str]:
        """Look up the identifier of a ``kind`` object whose ``key`` equals ``value``.
        
        Args:
            kind: Object kind; ``<kind>-list`` is run
            key: Natural key column
            value: Wanted natural key value
            options: Extra options for the listing command
            id_column: Column holding the identifier
            
        Returns:
            Identifier or None when not found
        """
        rows = self.list_rows(f"{kind}-list", options)
        uuid = self.find_uuid(rows, id_column, {key: value})
        logger.debug("[%s] %s %s=%s -> %s", self.kind, kind, key, value, uuid)
        return uuid
    
    @abstractmethod
    def ensure(self, descriptor) -> bool:
        """Converge one descriptor; True if a state-changing command ran."""
