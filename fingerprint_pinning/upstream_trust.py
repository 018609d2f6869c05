import datetime
import ipaddress
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from cryptography.x509 import Certificate, DNSName, IPAddress, load_der_x509_certificate, load_pem_x509_certificates
from cryptography.x509.verification import PolicyBuilder, Store, VerificationError


# Any callable taking (chain, host) and returning whether the chain is trusted for the host
ChainTrustCheck = Callable[[Sequence[bytes], str], bool]


class ChainTrustCheckerInterface(ABC):
    """The TLS stack's standard validation of a certificate chain (path building, expiry, hostname), which runs before
    the chain's fingerprints are compared with the pinned ones.
    """

    @abstractmethod
    def check_chain_trust(self, chain: Sequence[bytes], host: str) -> bool:
        pass

    def __call__(self, chain: Sequence[bytes], host: str) -> bool:
        return self.check_chain_trust(chain, host)


class X509ChainTrustChecker(ChainTrustCheckerInterface):
    """Validate a DER certificate chain (leaf first) for a server name against a set of trusted root certificates.

    Uses the Web PKI server verification policy from cryptography.
    """

    def __init__(
        self, trusted_roots: List[Certificate], validation_time: Optional[datetime.datetime] = None
    ) -> None:
        if not trusted_roots:
            raise ValueError("At least one trusted root certificate is required")
        self._store = Store(trusted_roots)
        self._validation_time = validation_time

    @classmethod
    def from_pem_file(cls, pem_bundle_path: Path) -> "X509ChainTrustChecker":
        with open(pem_bundle_path, mode="rb") as pem_file:
            trusted_roots = load_pem_x509_certificates(pem_file.read())
        return cls(trusted_roots)

    def check_chain_trust(self, chain: Sequence[bytes], host: str) -> bool:
        if not chain:
            return False

        try:
            parsed_chain = [load_der_x509_certificate(cert_bytes) for cert_bytes in chain]
        except ValueError as e:
            logging.debug(f"Could not parse the certificate chain presented by {host}: {e}")
            return False

        builder = PolicyBuilder().store(self._store)
        if self._validation_time is not None:
            builder = builder.time(self._validation_time)
        try:
            verifier = builder.build_server_verifier(self._get_subject(host))
            verifier.verify(parsed_chain[0], parsed_chain[1:])
        except (ValueError, VerificationError) as e:
            logging.debug(f"Certificate chain presented by {host} failed validation: {e}")
            return False
        return True

    @staticmethod
    def _get_subject(host: str) -> Union[DNSName, IPAddress]:
        # IP literals must be matched against IP SANs, not DNS names
        try:
            return IPAddress(ipaddress.ip_address(host.strip("[]")))
        except ValueError:
            return DNSName(host)
