"""Keystone catalog endpoint registration."""
from __future__ import annotations
import logging
from typing import Dict

from .exceptions import ServiceNotFoundError
from .services import CatalogReconciler

logger = logging.getLogger(__name__)


class EndpointReconciler(CatalogReconciler):
    """Register the endpoint of a catalog service.
    
    Existing endpoints are looked up by service id only, so a service is
    expected to carry a single endpoint whatever its region.
    """
    
    kind = "endpoint"
    
    @staticmethod
    def create_options(endpoint, service_uuid: str) -> Dict[str, str]:
        return {
            "region": endpoint.region,
            "service_id": service_uuid,
            "publicurl": endpoint.public_url,
            "internalurl": endpoint.internal_url,
            "adminurl": endpoint.admin_url,
        }
    
    def need_update(self, endpoint, service_uuid: str) -> bool:
        """Return True when no listed endpoint of the service has the declared region and URLs."""
        rows = self.list_rows("endpoint-list")
        wanted = self.create_options(endpoint, service_uuid)
        return self.find_uuid(rows, "id", wanted) is None
    
    def converge(self, endpoint) -> bool:
        """Create the endpoint, or replace it when its region or URLs drifted.
        
        Args:
            endpoint: Endpoint descriptor
            
        Returns:
            True if an endpoint was created or replaced
            
        Raises:
            ServiceNotFoundError: If no service of the declared type exists
        """
        service_uuid = self.identity_uuid("service", "type", endpoint.service_type)
        if not service_uuid:
            raise ServiceNotFoundError(
                f"[endpoint] Unable to find service type '{endpoint.service_type}' to create endpoint"
            )
        
        endpoint_uuid = self.identity_uuid("endpoint", "service_id", service_uuid)
        if endpoint_uuid:
            logger.info("[endpoint] Endpoint for service '%s' already exists (id=%s)", endpoint.service_type, endpoint_uuid)
            if not self.need_update(endpoint, service_uuid):
                return False
            logger.info("[endpoint] Endpoint for service '%s' needs to be updated, deleting it", endpoint.service_type)
            self.command.invoke("endpoint-delete", {"": endpoint_uuid})
        
        self.command.invoke("endpoint-create", self.create_options(endpoint, service_uuid))
        logger.info("[endpoint] Endpoint for service '%s' in '%s' created", endpoint.service_type, endpoint.region)
        return True
