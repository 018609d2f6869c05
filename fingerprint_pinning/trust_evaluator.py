import logging
from typing import Iterable, List, Sequence, Union

from fingerprint_pinning.digest import DigestAlgorithmEnum, compute_fingerprint
from fingerprint_pinning.evaluation_outcome import EvaluationOutcome, RejectionReasonEnum, ServerTrustEvaluationError
from fingerprint_pinning.pinned_fingerprints import PinnedFingerprintSet
from fingerprint_pinning.upstream_trust import ChainTrustCheck


class FingerprintTrustEvaluator:
    """Decide whether a TLS peer's certificate chain should be trusted, by comparing the fingerprint of each of its
    certificates with a set of pinned fingerprints.

    Pinning is an additional check: the chain must first pass the TLS stack's standard validation, which is delegated
    to the supplied chain_trust_checker. The evaluator holds no mutable state and can be shared between threads.
    """

    def __init__(
        self,
        pinned_fingerprints: Iterable[str],
        chain_trust_checker: ChainTrustCheck,
        digest_algorithm: Union[str, DigestAlgorithmEnum] = DigestAlgorithmEnum.SHA256,
    ) -> None:
        self.digest_algorithm = DigestAlgorithmEnum.from_name(digest_algorithm)
        self.pinned_fingerprints = PinnedFingerprintSet(pinned_fingerprints, self.digest_algorithm)
        self._chain_trust_checker = chain_trust_checker

    def evaluate(self, host: str, chain: Sequence[bytes]) -> EvaluationOutcome:
        """Evaluate the DER-encoded certificate chain (leaf first) presented by host.
        """
        if not self._chain_trust_checker(chain, host):
            return self._reject(host, RejectionReasonEnum.UPSTREAM_TRUST_FAILED)

        # Never skip pinning, even if the upstream check accepted a degenerate chain
        if len(chain) == 0:
            return self._reject(host, RejectionReasonEnum.EMPTY_CHAIN)

        for index, certificate_bytes in enumerate(chain):
            _, hex_fingerprint = compute_fingerprint(certificate_bytes, self.digest_algorithm)
            if hex_fingerprint in self.pinned_fingerprints:
                logging.debug(f"Certificate #{index} presented by {host} matches pinned fingerprint {hex_fingerprint}")
                return EvaluationOutcome.accept()

        return self._reject(host, RejectionReasonEnum.NO_MATCHING_FINGERPRINT)

    def check(self, host: str, chain: Sequence[bytes]) -> None:
        """Same as evaluate() but raise a ServerTrustEvaluationError if the chain is rejected.
        """
        outcome = self.evaluate(host, chain)
        if outcome.rejection_reason is not None:
            raise ServerTrustEvaluationError(host, outcome.rejection_reason)

    def compute_chain_fingerprints(self, chain: Sequence[bytes]) -> List[str]:
        return [compute_fingerprint(certificate_bytes, self.digest_algorithm)[1] for certificate_bytes in chain]

    @staticmethod
    def _reject(host: str, reason: RejectionReasonEnum) -> EvaluationOutcome:
        logging.debug(f"Rejected certificate chain presented by {host}: {reason.name}")
        return EvaluationOutcome.reject(reason)
