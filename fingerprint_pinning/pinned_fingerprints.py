import logging
import string
from typing import FrozenSet, Iterable, Iterator, List

from fingerprint_pinning.digest import DigestAlgorithmEnum


_HEX_DIGITS = frozenset(string.hexdigits.lower())


class PinnedFingerprintSet:
    """The fingerprints a peer's certificate chain is pinned to, normalized once at construction.

    Pins are stored lowercased and with all whitespace removed, so "AB 12 ..." and "ab12..." are the same pin. Pins
    that are not a valid hex digest for the configured algorithm are kept but can never match a computed fingerprint.
    Lookups take a lowercase hex fingerprint, as returned by compute_fingerprint().
    """

    def __init__(self, fingerprints: Iterable[str], digest_algorithm: DigestAlgorithmEnum) -> None:
        self.digest_algorithm = digest_algorithm

        normalized_fingerprints = [self.normalize(fingerprint) for fingerprint in fingerprints]
        # Keep the configured order for exporting; lookups use the frozenset
        self._ordered: List[str] = list(dict.fromkeys(normalized_fingerprints))
        self._fingerprints: FrozenSet[str] = frozenset(self._ordered)

        for fingerprint in self.invalid_fingerprints:
            logging.warning(
                f'Pinned fingerprint "{fingerprint}" is not a valid {digest_algorithm.value} digest and will never match'
            )

    @staticmethod
    def normalize(fingerprint: str) -> str:
        return "".join(fingerprint.split()).lower()

    def __contains__(self, hex_fingerprint: object) -> bool:
        if not isinstance(hex_fingerprint, str):
            return False
        return hex_fingerprint in self._fingerprints

    def __iter__(self) -> Iterator[str]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._fingerprints)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PinnedFingerprintSet):
            return False
        return self.digest_algorithm == other.digest_algorithm and self._fingerprints == other._fingerprints

    def __hash__(self) -> int:
        return hash((self.digest_algorithm, self._fingerprints))

    @property
    def invalid_fingerprints(self) -> List[str]:
        """The configured pins that can never match a fingerprint computed with the configured algorithm.
        """
        return [
            fingerprint
            for fingerprint in self._ordered
            if len(fingerprint) != self.digest_algorithm.hex_length or not set(fingerprint) <= _HEX_DIGITS
        ]
