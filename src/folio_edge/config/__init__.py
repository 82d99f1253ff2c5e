from folio_edge.config.gateway import GatewaySettings

__all__ = ["GatewaySettings"]
