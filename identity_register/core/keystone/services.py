"""Keystone catalog service registration."""
from __future__ import annotations
import logging
from abc import abstractmethod
from typing import Dict

from .base import Reconciler, TableParser
from .client import KeystoneCommand
from .prettytable import parse_table

logger = logging.getLogger(__name__)


class CatalogReconciler(Reconciler):
    """Reconciler for objects stored in the service catalog.
    
    A templated catalog is read from a file on the identity host and cannot be
    changed through the CLI, so every ``ensure`` is then a no-op.
    """
    
    def __init__(self, command: KeystoneCommand, parse: TableParser = parse_table, *, dynamic_catalog: bool = True):
        super().__init__(command, parse)
        self.dynamic_catalog = dynamic_catalog
    
    def ensure(self, descriptor) -> bool:
        if not self.dynamic_catalog:
            logger.info("[%s] Skipping %s registration - templated catalog backend in use", self.kind, self.kind)
            return False
        return self.converge(descriptor)
    
    @abstractmethod
    def converge(self, descriptor) -> bool:
        """Create or replace the catalog object; runs only for a dynamic catalog."""


class ServiceReconciler(CatalogReconciler):
    """Register catalog services, keyed by service type."""
    
    kind = "service"
    
    @staticmethod
    def create_options(service) -> Dict[str, object]:
        return {
            "type": service.type,
            "name": service.name,
            "description": service.description,
        }
    
    def need_update(self, service) -> bool:
        """Return True when no listed service matches type, name and description."""
        rows = self.list_rows("service-list")
        wanted = {
            "type": service.type,
            "name": service.name,
            "description": service.description or "",
        }
        return self.find_uuid(rows, "id", wanted) is None
    
    def converge(self, service) -> bool:
        """Create the service, or replace it when name/description drifted.
        
        Args:
            service: Service descriptor
            
        Returns:
            True if a service was created or replaced
        """
        service_uuid = self.identity_uuid("service", "type", service.type)
        if service_uuid:
            logger.info("[service] Service type '%s' already exists (id=%s)", service.type, service_uuid)
            if not self.need_update(service):
                return False
            logger.info("[service] Service type '%s' needs to be updated, deleting it", service.type)
            self.command.invoke("service-delete", {"": service_uuid})
        
        self.command.invoke("service-create", self.create_options(service))
        logger.info("[service] Service '%s' (%s) created", service.name, service.type)
        return True
