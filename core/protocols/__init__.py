"""Protocol issuance."""
from core.protocols.issuer import ProtocolIssuer

__all__ = ['ProtocolIssuer']
